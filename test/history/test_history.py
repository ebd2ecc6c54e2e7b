#!/usr/bin/env python3
"""
Unit tests for history module.

Tests PlayerStorage, HandStorage and SessionTracker with coverage of the
player registry, atomic counter updates, the event log, hand history and
session lifecycle.
"""

import json
import os
import tempfile
import threading
import unittest
from datetime import datetime, timedelta
from unittest.mock import Mock

from src.history.hand_storage import HandStorage
from src.history.player_storage import PlayerStorage
from src.history.session_tracker import SessionTracker
from src.models.chat import ChatMessage
from src.models.decision import Decision
from src.models.events import decode_event
from src.models.hand_record import HandRecord
from src.models.hand_state import HandState


class TempDatabaseTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_db = tempfile.NamedTemporaryFile(delete=False, suffix='.db')
        self.temp_db.close()

    def tearDown(self):
        os.unlink(self.temp_db.name)


class TestPlayerStorage(TempDatabaseTestCase):
    """Test player registry and counter persistence."""

    def setUp(self):
        super().setUp()
        self.storage = PlayerStorage(self.temp_db.name)

    def tearDown(self):
        self.storage.close()
        super().tearDown()

    def test_upsert_creates_zeroed_stats(self):
        self.assertTrue(self.storage.upsert_player('p1', 'Villain'))

        player = self.storage.get_player('p1')
        stats = self.storage.get_stats('p1')

        self.assertEqual(player['name'], 'Villain')
        self.assertEqual(player['total_hands'], 1)
        self.assertTrue(all(value == 0 for value in stats.counters().values()))

    def test_upsert_existing_bumps_hands(self):
        self.storage.upsert_player('p1', 'Villain')
        self.storage.upsert_player('p1', 'Villain')
        self.storage.upsert_player('p1', 'Villain', count_hand=False)

        self.assertEqual(self.storage.get_player('p1')['total_hands'], 2)

    def test_upsert_keeps_counters(self):
        self.storage.upsert_player('p1', 'Villain')
        self.storage.increment_stats('p1', {'vpip_num': 1, 'vpip_denom': 1})

        self.storage.upsert_player('p1', 'Villain')

        self.assertEqual(self.storage.get_stats('p1').vpip_denom, 1)

    def test_unknown_player(self):
        self.assertIsNone(self.storage.get_player('nobody'))
        self.assertIsNone(self.storage.get_stats('nobody'))

    def test_increment_stats(self):
        self.storage.upsert_player('p1', 'Villain')

        self.assertTrue(self.storage.increment_stats('p1', {'af_bets': 2, 'af_calls': 1}))

        stats = self.storage.get_stats('p1')
        self.assertEqual(stats.af_bets, 2)
        self.assertEqual(stats.af_calls, 1)
        self.assertIsNotNone(stats.updated_at)

    def test_increment_unregistered_is_noop(self):
        self.assertFalse(self.storage.increment_stats('ghost', {'af_bets': 1}))
        self.assertIsNone(self.storage.get_stats('ghost'))

    def test_increment_ignores_unknown_counters(self):
        self.storage.upsert_player('p1', 'Villain')

        self.assertFalse(self.storage.increment_stats('p1', {'drop_table': 1}))
        self.assertFalse(self.storage.increment_stats('p1', {}))

    def test_concurrent_increments_are_not_lost(self):
        """Two observers of the same player never lose updates."""
        self.storage.upsert_player('p1', 'Villain')

        def observe():
            for _ in range(100):
                self.storage.increment_stats('p1', {'vpip_num': 1, 'vpip_denom': 1})

        threads = [threading.Thread(target=observe) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = self.storage.get_stats('p1')
        self.assertEqual(stats.vpip_num, 200)
        self.assertEqual(stats.vpip_denom, 200)

    def test_llm_notes(self):
        self.storage.upsert_player('p1', 'Villain')

        self.assertTrue(self.storage.update_llm_notes('p1', 'Calls too much.'))
        self.assertEqual(self.storage.get_player('p1')['llm_notes'], 'Calls too much.')
        self.assertFalse(self.storage.update_llm_notes('ghost', 'x'))

    def test_get_all_players(self):
        self.storage.upsert_player('p1', 'One')
        self.storage.upsert_player('p2', 'Two')

        self.assertEqual({p['id'] for p in self.storage.get_all_players()}, {'p1', 'p2'})


class TestHandStorage(TempDatabaseTestCase):
    """Test event log, hand history and session records."""

    def setUp(self):
        super().setUp()
        self.storage = HandStorage(self.temp_db.name)

    def tearDown(self):
        self.storage.close()
        super().tearDown()

    def test_event_log_preserves_order(self):
        self.storage.insert_event('s1', {'type': 'HAND_START', 'timestamp': 1, 'payload': {'hand_id': 'h1'}})
        self.storage.insert_event('s1', {'type': 'ACTION', 'timestamp': 2,
                                         'payload': {'player_id': 'p1', 'action': 'CALL'}})
        self.storage.insert_event('s2', {'type': 'ACTION', 'timestamp': 3, 'payload': {}})

        events = self.storage.get_events('s1')

        self.assertEqual([e['type'] for e in events], ['HAND_START', 'ACTION'])
        self.assertEqual(events[1]['payload']['action'], 'CALL')

    def test_event_log_keeps_unknown_and_typed_events(self):
        self.assertTrue(self.storage.insert_event('s1', {'type': 'TABLE_CHAT', 'payload': {'text': 'gl'}}))
        typed = decode_event({'type': 'CARD_DEAL', 'timestamp': 4,
                              'payload': {'target': 'hero', 'cards': ['Ah', 'Kc']}})
        self.assertTrue(self.storage.insert_event('s1', typed))
        self.assertFalse(self.storage.insert_event('s1', 'not an event'))

        events = self.storage.get_events('s1')
        self.assertEqual(events[0]['type'], 'TABLE_CHAT')
        self.assertEqual(events[1]['payload']['cards'], ['Ah', 'Kc'])

    def test_save_and_get_hand_record(self):
        record = HandRecord(raw_log='[]', hero_position='BTN', hero_cards='Ah Kc',
                            hero_decision='RAISE', recommended='RAISE 2.5x', lambda_used=0.5)

        record_id = self.storage.save_hand_record(record)
        hands = self.storage.get_recent_hands()

        self.assertIsNotNone(record_id)
        self.assertEqual(len(hands), 1)
        self.assertEqual(hands[0].id, record_id)
        self.assertEqual(hands[0].recommended, 'RAISE 2.5x')

    def test_recent_hands_limit(self):
        for i in range(5):
            self.storage.save_hand_record(HandRecord(raw_log='[]',
                                                     played_at=datetime.now() + timedelta(seconds=i)))

        self.assertEqual(len(self.storage.get_recent_hands(limit=3)), 3)

    def test_session_lifecycle(self):
        start = datetime.now()
        self.assertTrue(self.storage.create_session('s1', 'https://example.test/table', start))
        self.assertFalse(self.storage.create_session('s1', 'https://example.test/table', start))

        self.assertTrue(self.storage.end_session('s1', start + timedelta(minutes=5)))
        session = self.storage.get_session('s1')

        self.assertEqual(session['status'], 'ended')
        self.assertIsNone(self.storage.get_session('missing'))
        self.assertFalse(self.storage.end_session('missing', start))

    def test_summarize(self):
        now = datetime.now()
        for decision in ['FOLD', 'FOLD', 'RAISE', None]:
            self.storage.save_hand_record(HandRecord(raw_log='[]', hero_decision=decision, ev_loss=0.5,
                                                     played_at=now))
        self.storage.save_hand_record(HandRecord(raw_log='[]', hero_decision='CALL',
                                                 played_at=now - timedelta(days=1)))

        summary = self.storage.summarize(now - timedelta(hours=8))

        self.assertEqual(summary['hands_played'], 4)
        self.assertEqual(summary['hero_decisions'], {'fold': 2, 'call': 0, 'raise': 1, 'bet': 0})
        self.assertAlmostEqual(summary['ev_loss_total'], 2.0)

    def test_summarize_empty(self):
        summary = self.storage.summarize(datetime.now())

        self.assertEqual(summary['hands_played'], 0)
        self.assertIsNone(summary['session_start'])

    def test_chat_history_is_oldest_first(self):
        for i in range(4):
            role = 'user' if i % 2 == 0 else 'assistant'
            self.assertTrue(self.storage.insert_chat_message('s1', ChatMessage(role=role, content=f'turn {i}')))
        self.storage.insert_chat_message('s2', ChatMessage(role='user', content='other table'))

        history = self.storage.get_chat_history('s1')

        self.assertEqual([m.content for m in history], ['turn 0', 'turn 1', 'turn 2', 'turn 3'])
        self.assertEqual(history[1].role, 'assistant')

    def test_chat_history_limit_keeps_latest(self):
        for i in range(5):
            self.storage.insert_chat_message('s1', ChatMessage(role='user', content=f'turn {i}'))

        history = self.storage.get_chat_history('s1', limit=2)

        self.assertEqual([m.content for m in history], ['turn 3', 'turn 4'])
        self.assertEqual(self.storage.get_chat_history('missing'), [])


class TestSessionTracker(TempDatabaseTestCase):
    """Test session lifecycle and decision recording."""

    def setUp(self):
        super().setUp()
        self.storage = HandStorage(self.temp_db.name)
        self.state_machine = Mock()
        self.tracker = SessionTracker(self.storage, self.state_machine)

        self.decision = Decision(action='RAISE', sizing='2.5x', reasoning='In range', confidence=0.0,
                                 gto_action='RAISE 2.5x', exploit_action='RAISE 2.5x')
        self.state = HandState(session_id='s1', hand_id='h1', street='PREFLOP', hero_position='BTN',
                               hero_cards=['Ah', 'Kc'],
                               events=[decode_event({'type': 'HAND_START', 'timestamp': 1,
                                                     'payload': {'hand_id': 'h1'}})])

    def tearDown(self):
        self.storage.close()
        super().tearDown()

    def test_start_and_end_session(self):
        session_id = self.tracker.start_session('https://example.test/table')

        self.assertTrue(self.tracker.is_session_active())
        self.assertEqual(self.storage.get_session(session_id)['status'], 'active')

        stats = self.tracker.end_session()

        self.assertEqual(stats['session_id'], session_id)
        self.assertEqual(stats['decisions_recorded'], 0)
        self.assertFalse(self.tracker.is_session_active())
        self.state_machine.end_session.assert_called_once_with(session_id)

    def test_start_twice_raises(self):
        self.tracker.start_session('https://example.test/table')

        with self.assertRaises(RuntimeError):
            self.tracker.start_session('https://example.test/other')

    def test_end_without_session_raises(self):
        with self.assertRaises(RuntimeError):
            self.tracker.end_session()

    def test_record_decision(self):
        self.tracker.start_session('https://example.test/table')

        record_id = self.tracker.record_decision(self.state, self.decision, 1.7, hero_decision='raise')

        hands = self.storage.get_recent_hands()
        self.assertEqual(hands[0].id, record_id)
        self.assertEqual(hands[0].hero_cards, 'Ah Kc')
        self.assertEqual(hands[0].lambda_used, 1.0)
        self.assertEqual(hands[0].hero_decision, 'RAISE')
        self.assertEqual(json.loads(hands[0].raw_log)[0]['type'], 'HAND_START')
        self.assertEqual(self.tracker.end_session()['decisions_recorded'], 1)

    def test_session_summary(self):
        self.tracker.record_decision(self.state, self.decision, 0.5, hero_decision='FOLD')

        summary = self.tracker.session_summary()

        self.assertEqual(summary['hands_played'], 1)
        self.assertEqual(summary['hero_decisions']['fold'], 1)


if __name__ == '__main__':
    unittest.main()
