#!/usr/bin/env python3
"""
Unit tests for the models module in src/models/.

Tests card parsing, event decoding at the boundary, derived player ratios,
GameState projection and decision validation.
"""

import unittest

from pydantic import ValidationError

from src.models.card import Card, parse_cards
from src.models.decision import Decision, PolicyResult
from src.models.events import (ActionEvent, CardDealEvent, HandStartEvent, ShowdownEvent,
                               decode_event, encode_event)
from src.models.game_state import GameState
from src.models.hand_state import HandState, PlayerAction, SeatedPlayer
from src.models.hand_record import HandRecord
from src.models.player_stats import PlayerProfile, PlayerStats, StatsSummary, hash_player_id


class TestCard(unittest.TestCase):
    """Test Card model validation and parsing."""

    def test_valid_card_creation(self):
        for rank in '23456789TJQKA':
            for suit in ['hearts', 'diamonds', 'clubs', 'spades']:
                card = Card(rank=rank, suit=suit)
                self.assertEqual(card.rank, rank)
                self.assertEqual(card.suit, suit)

    def test_invalid_rank_validation(self):
        for rank in ['1', '0', 'B', 'ace', '']:
            with self.assertRaises(ValidationError) as context:
                Card(rank=rank, suit='hearts')
            self.assertIn('Invalid rank', str(context.exception))

    def test_short_notation(self):
        """Short strings parse case-insensitively, 10 means T."""
        self.assertEqual(str(Card.model_validate('Kd')), 'Kd')
        self.assertEqual(str(Card.model_validate('as')), 'As')
        self.assertEqual(Card.model_validate('10h').rank, 'T')
        self.assertEqual(Card.model_validate('Kd').suit, 'diamonds')

    def test_parse_returns_none_on_garbage(self):
        self.assertIsNone(Card.parse('Zx'))
        self.assertIsNone(Card.parse('K'))

    def test_parse_cards_drops_invalid(self):
        cards = parse_cards(['Ah', 'garbage', None, 'Kc', 42])

        self.assertEqual([str(c) for c in cards], ['Ah', 'Kc'])
        self.assertEqual(parse_cards(None), [])
        self.assertEqual(parse_cards('AhKc'), [])

    def test_card_is_immutable(self):
        card = Card(rank='A', suit='hearts')
        with self.assertRaises(ValidationError):
            card.rank = 'K'


class TestEvents(unittest.TestCase):
    """Test event decoding of unreliable scraper input."""

    def test_decode_hand_start(self):
        event = decode_event({
            'type': 'HAND_START',
            'timestamp': 1700000000000,
            'payload': {
                'hand_id': 'h1',
                'small_blind_bb': 0.5,
                'big_blind_bb': 1,
                'players': [{'name': 'Villain', 'position': 'BB', 'stack_bb': 100}],
            },
        })

        self.assertIsInstance(event, HandStartEvent)
        self.assertEqual(event.payload.hand_id, 'h1')
        self.assertEqual(event.payload.players[0].id, hash_player_id('Villain'))

    def test_unknown_kind_decodes_to_none(self):
        self.assertIsNone(decode_event({'type': 'CHAT_MESSAGE', 'payload': {}}))
        self.assertIsNone(decode_event({'payload': {}}))
        self.assertIsNone(decode_event('HAND_START'))

    def test_missing_payload_fields_default(self):
        """Missing keys become empty or zero instead of raising."""
        action = decode_event({'type': 'ACTION'})
        self.assertIsInstance(action, ActionEvent)
        self.assertEqual(action.payload.player_id, '')
        self.assertEqual(action.payload.amount_bb, 0.0)

        deal = decode_event({'type': 'CARD_DEAL', 'payload': {'target': 'board', 'cards': 'oops'}})
        self.assertIsInstance(deal, CardDealEvent)
        self.assertEqual(deal.payload.cards, [])

        start = decode_event({'type': 'HAND_START', 'timestamp': 'soon', 'payload': None})
        self.assertEqual(start.timestamp, 0.0)
        self.assertEqual(start.payload.players, [])

    def test_action_is_upper_cased(self):
        event = decode_event({'type': 'action', 'payload': {'player_id': 'p1', 'action': 'raise',
                                                             'amount_bb': '3'}})
        self.assertEqual(event.payload.action, 'RAISE')
        self.assertEqual(event.payload.amount_bb, 3.0)

    def test_showdown_accepts_player_dicts(self):
        event = decode_event({'type': 'SHOWDOWN', 'payload': {'players': [{'id': 'p1'}, 'p2', None]}})

        self.assertIsInstance(event, ShowdownEvent)
        self.assertEqual(event.payload.player_ids, ['p1', 'p2'])

    def test_encode_event(self):
        event = decode_event({'type': 'CARD_DEAL', 'timestamp': 5,
                              'payload': {'target': 'hero', 'cards': ['Ah', 'Kc']}})

        encoded = encode_event(event)

        self.assertEqual(encoded['type'], 'CARD_DEAL')
        self.assertEqual(encoded['payload'], {'target': 'hero', 'cards': ['Ah', 'Kc']})


class TestPlayerStats(unittest.TestCase):
    """Test derived ratios."""

    def test_ratios_undefined_when_denominator_zero(self):
        stats = PlayerStats(player_id='p1')

        self.assertIsNone(stats.vpip)
        self.assertIsNone(stats.pfr)
        self.assertIsNone(stats.aggression_factor)
        self.assertIsNone(stats.fold_to_cbet)
        self.assertIsNone(stats.fold_to_3bet)
        self.assertIsNone(stats.wtsd)

    def test_ratios(self):
        stats = PlayerStats(player_id='p1', vpip_num=45, vpip_denom=100, pfr_num=35, pfr_denom=100,
                            af_bets=6, af_calls=3)

        self.assertAlmostEqual(stats.vpip, 0.45)
        self.assertAlmostEqual(stats.pfr, 0.35)
        self.assertAlmostEqual(stats.aggression_factor, 2.0)
        self.assertEqual(stats.sample_size, 100)

    def test_hash_player_id_is_stable(self):
        self.assertEqual(hash_player_id('Villain'), hash_player_id('  villain '))
        self.assertEqual(len(hash_player_id('Villain')), 64)

    def test_summary_and_profile_defaults(self):
        summary = StatsSummary.from_stats(None)
        profile = PlayerProfile(id='p1')

        self.assertIsNone(summary.vpip)
        self.assertEqual(profile.name, 'Unknown')
        self.assertEqual(profile.tag, 'UNKNOWN')
        with self.assertRaises(ValidationError):
            PlayerProfile(id='p1', tag='SHARK')


class TestGameState(unittest.TestCase):
    """Test GameState validation and projection from HandState."""

    def test_invalid_street(self):
        with self.assertRaises(ValidationError):
            GameState(street='SHOWDOWN')

    def test_too_many_board_cards(self):
        with self.assertRaises(ValidationError):
            GameState(street='RIVER', board=['2c', '3c', '4c', '5c', '6c', '7c'])

    def test_from_hand_state(self):
        hand = HandState(
            session_id='s1',
            street='FLOP',
            hero_position='BTN',
            hero_id='hero',
            hero_cards=['Ah', 'Kc'],
            board=['Kd', '8c', '3s'],
            pot_bb=6.5,
            players=[
                SeatedPlayer(id='hero', name='Me', position='BTN', stack_bb=100),
                SeatedPlayer(id='v1', name='Villain', position='BB', stack_bb=80),
                SeatedPlayer(id='v2', name='Folder', position='SB', active=False),
            ],
        )
        hand.actions['FLOP'].append(PlayerAction(player_id='v1', action='BET', amount_bb=3))

        state = GameState.from_hand_state(hand, to_call_bb=3)

        self.assertEqual(state.street, 'FLOP')
        self.assertEqual([v.player_id for v in state.villains], ['v1'])
        self.assertEqual(state.primary_villain.stack_bb, 80)
        self.assertEqual(state.action_history, ['Villain BET 3'])
        self.assertEqual(state.to_call_bb, 3)

    def test_terminal_street_projects_to_board_street(self):
        hand = HandState(session_id='s1', street='SHOWDOWN', board=['Kd', '8c', '3s', '2h'])

        self.assertEqual(GameState.from_hand_state(hand).street, 'TURN')
        self.assertEqual(GameState.from_hand_state(HandState(session_id='s2')).street, 'PREFLOP')

    def test_hero_found_by_seat_without_hero_id(self):
        hand = HandState(
            session_id='s1',
            street='PREFLOP',
            hero_position='btn',
            players=[
                SeatedPlayer(id='hero', name='Me', position='BTN'),
                SeatedPlayer(id='v1', name='Villain', position='BB'),
            ],
        )

        state = GameState.from_hand_state(hand)

        self.assertEqual([v.player_id for v in state.villains], ['v1'])
        self.assertEqual(state.primary_villain.player_id, 'v1')

    def test_unidentified_hero_is_logged(self):
        hand = HandState(
            session_id='s1',
            street='PREFLOP',
            players=[
                SeatedPlayer(id='p1', name='One', position='BTN'),
                SeatedPlayer(id='p2', name='Two', position='BB'),
            ],
        )

        with self.assertLogs('src.models.game_state', level='WARNING'):
            state = GameState.from_hand_state(hand)

        self.assertEqual([v.player_id for v in state.villains], ['p1', 'p2'])

    def test_multi_word_names_are_one_token_word(self):
        hand = HandState(session_id='s1', street='PREFLOP', hero_id='hero',
                         players=[SeatedPlayer(id='v1', name='Big Raiser', position='BB')])
        hand.actions['PREFLOP'].append(PlayerAction(player_id='v1', action='CHECK'))

        self.assertEqual(GameState.from_hand_state(hand).action_history, ['Big_Raiser CHECK'])


class TestDecision(unittest.TestCase):
    """Test PolicyResult and Decision validation."""

    def test_policy_result_label(self):
        self.assertEqual(PolicyResult(action='raise', sizing='2.5x').label, 'RAISE 2.5x')
        self.assertEqual(PolicyResult(action='FOLD').label, 'FOLD')

    def test_invalid_action(self):
        with self.assertRaises(ValidationError):
            PolicyResult(action='SHOVE')

    def test_decision_bounds(self):
        with self.assertRaises(ValidationError):
            Decision(action='CALL', reasoning='', confidence=1.5, gto_action='CALL', exploit_action='CALL')
        with self.assertRaises(ValidationError):
            Decision(action='CALL', reasoning='', confidence=0.5, gto_action='CALL',
                     exploit_action='CALL', source='oracle')

    def test_hand_record_hero_decision(self):
        record = HandRecord(raw_log='[]', hero_decision='fold')
        self.assertEqual(record.hero_decision, 'FOLD')

        with self.assertRaises(ValidationError):
            HandRecord(raw_log='[]', hero_decision='muck')


if __name__ == '__main__':
    unittest.main()
