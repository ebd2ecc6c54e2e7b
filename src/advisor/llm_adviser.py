#!/usr/bin/env python3
"""
External decision source backed by the Anthropic Messages API.

The adviser may override the rule-based decision but is never required for
one: every failure (transport, timeout, bad JSON, invalid action) surfaces
as ExternalAdviserError so the caller can fall back to the rules.

Usage:
    from src.advisor.llm_adviser import AnthropicAdviser, ExternalAdviserError

    adviser = AnthropicAdviser()
    try:
        decision = adviser.advise(state, 0.7, profile, gto, exploit)
    except ExternalAdviserError:
        decision = rule_based
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import anthropic
from anthropic import Anthropic

from src.config.settings import Settings
from src.models.chat import ChatMessage
from src.models.decision import Decision, PolicyResult
from src.models.game_state import GameState
from src.models.player_stats import PlayerProfile, PlayerStats
from src.stats.classifier import classify

logger = logging.getLogger(__name__)

RECENT_ACTIONS = 6
_FENCE = re.compile(r'^```(?:json)?|```$', re.MULTILINE)
_DATA_URL = re.compile(r'^data:image/\w+;base64,')


class ExternalAdviserError(Exception):
    """The external decision source could not produce a usable decision."""


def _fmt_ratio(value: Optional[float]) -> str:
    return f"{value * 100:.0f}%" if value is not None else 'N/A'


def strategy_mode(lam: float) -> str:
    """Prompt wording for the requested exploit weight."""
    if lam < 0.2:
        return 'Pure GTO, ignore villain tendencies'
    if lam > 0.8:
        return 'Maximum exploit, heavily weight villain tendencies'
    return f'Balanced (lambda={lam:.2f}), blend GTO with villain reads'


def follow_up_suggestions(question: str, state: Optional[GameState] = None, limit: int = 3) -> List[str]:
    """Next questions to offer, skipping any the hero just asked."""
    villain = state.primary_villain if state is not None else None
    seat = villain.position if villain is not None and villain.position else 'villain'
    candidates = [
        'Why is this better than folding?',
        'What sizing maximizes EV here?',
        f'How is the {seat} playing today?',
        'What if I raise bigger?',
        'What if villain re-raises?',
        'Should I slow-play instead?',
        'What are my pot odds?',
        "What's my equity vs their range?",
        'When should I deviate from GTO here?',
    ]
    asked = question.lower()
    return [c for c in candidates if c.lower()[:10] not in asked][:limit]


class AnthropicAdviser:
    """Claude-backed adviser for decisions and player notes."""

    def __init__(self, client: Optional[Anthropic] = None):
        """
        Initialize the adviser.

        Args:
            client: Anthropic client. One is created from ANTHROPIC_API_KEY if None.
        """
        self.settings = Settings()

        self.settings.create("advisor.external.model", default="claude-haiku-4-5-20251001")
        self.settings.create("advisor.external.timeout_seconds", default=10.0)
        self.settings.create("advisor.external.max_tokens", default=180)
        self.settings.create("advisor.chat.model", default="claude-sonnet-4-5")
        self.settings.create("advisor.chat.max_tokens", default=400)

        self.model = self.settings.get("advisor.external.model")
        self.timeout = float(self.settings.get("advisor.external.timeout_seconds"))
        self.max_tokens = int(self.settings.get("advisor.external.max_tokens"))
        self.chat_model = self.settings.get("advisor.chat.model")
        self.chat_max_tokens = int(self.settings.get("advisor.chat.max_tokens"))

        self.client = client or Anthropic(timeout=self.timeout, max_retries=0)

        logger.info(f"AnthropicAdviser initialized with model {self.model}")

    def advise(self, state: GameState, lam: float, villain_profile: Optional[PlayerProfile],
               gto: PolicyResult, exploit: PolicyResult, screenshot: Optional[str] = None,
               confidence: float = 0.0) -> Decision:
        """
        Ask the model for a decision.

        Args:
            state: Decision-time game state
            lam: Requested exploit weight in [0, 1]
            villain_profile: Primary villain's profile, if known
            gto: GTO sub-decision (sent as a signal)
            exploit: Exploit sub-decision (sent as a signal)
            screenshot: Optional base64 JPEG (data URL prefix allowed)
            confidence: Rule-based confidence, used when the model omits one

        Returns:
            Decision with source 'external'

        Raises:
            ExternalAdviserError: On any transport or response problem
        """
        prompt = self.build_prompt(state, lam, villain_profile, gto, exploit)
        text = self._complete(self._user_content(prompt, screenshot))
        parsed = self._parse_response(text)

        try:
            model_confidence = parsed.get('confidence')
            decision_confidence = confidence if model_confidence is None else float(model_confidence)
            return Decision(
                action=parsed.get('action'),
                sizing=parsed.get('sizing') or None,
                reasoning=str(parsed.get('reasoning') or 'External adviser recommendation'),
                confidence=min(1.0, max(0.0, decision_confidence)),
                gto_action=gto.label,
                exploit_action=exploit.label,
                effective_lambda=lam * confidence,
                source='external',
            )
        except (TypeError, ValueError) as e:
            raise ExternalAdviserError(f"Invalid decision from external adviser: {e}") from e

    def summarize_player(self, profile: PlayerProfile) -> str:
        """
        One or two sentence tendency summary for a player.

        Raises:
            ExternalAdviserError: On any transport problem or empty response
        """
        stats = profile.stats
        af = f"{stats.af:.2f}" if stats.af is not None else 'N/A'
        prompt = (
            f"Poker opponent profile: {profile.name}, {profile.total_hands} hands, tag {profile.tag}. "
            f"VPIP={_fmt_ratio(stats.vpip)}, PFR={_fmt_ratio(stats.pfr)}, AF={af}, "
            f"Fold to c-bet={_fmt_ratio(stats.fold_to_cbet)}, WTSD={_fmt_ratio(stats.wtsd)}.\n"
            "Write a brief, actionable summary for in-game use in one or two sentences."
        )

        text = self._complete([{"type": "text", "text": prompt}]).strip()
        if not text:
            raise ExternalAdviserError("Empty player summary from external adviser")
        return text

    def build_prompt(self, state: GameState, lam: float, villain_profile: Optional[PlayerProfile],
                     gto: PolicyResult, exploit: PolicyResult) -> str:
        """Text prompt describing the spot and the rule-based signals."""
        villain = state.primary_villain
        villain_context = 'No villain data yet (new player or first hands).'
        if villain_profile is not None and villain_profile.stats.sample_size > 0:
            stats = villain_profile.stats
            af = f"{stats.af:.2f}" if stats.af is not None else 'N/A'
            seat = f", Seat={villain.position or '?'}, Stack={villain.stack_bb:g}bb" if villain is not None else ''
            villain_context = (
                f"[{villain_profile.tag}] {stats.sample_size} hands: VPIP={_fmt_ratio(stats.vpip)}, "
                f"PFR={_fmt_ratio(stats.pfr)}, AF={af}, Fold to 3bet={_fmt_ratio(stats.fold_to_3bet)}, "
                f"Fold to Cbet={_fmt_ratio(stats.fold_to_cbet)}{seat}"
            )

        board = ' '.join(str(c) for c in state.board) or '(none, preflop)'
        recent = ' -> '.join(state.action_history[-RECENT_ACTIONS:]) or 'none'

        return (
            "You are an expert poker GTO coach. Analyze this hand and give the optimal action.\n\n"
            f"Street: {state.street}\n"
            f"Hero: {state.hero_position}, holding {' '.join(str(c) for c in state.hero_cards)}\n"
            f"Board: {board}\n"
            f"Pot: {state.pot_bb:g}bb | To call: {state.to_call_bb:g}bb | Hero stack: {state.stack_bb:g}bb\n"
            f"Recent action: {recent}\n"
            f"Villain: {villain_context}\n"
            f"Strategy mode: {strategy_mode(lam)}\n"
            f"Rule-based signals: GTO={gto.label}, Exploit={exploit.label}\n\n"
            "Respond with ONLY a raw JSON object, no markdown, no code fences:\n"
            '{"action":"FOLD|CHECK|CALL|BET|RAISE","sizing":"e.g. 2.5x or 67% pot (null if none)",'
            '"reasoning":"one concise sentence explaining the key reason","confidence":0.0}'
        )

    def chat(self, question: str, state: Optional[GameState] = None,
             villain_stats: Optional[Dict[str, Optional[PlayerStats]]] = None,
             recommendation: Optional[str] = None, lam: float = 0.5,
             history: Sequence[ChatMessage] = ()) -> str:
        """
        Answer a question about the current spot.

        Args:
            question: Hero's question
            state: Current game state, if any
            villain_stats: Counters per villain player id (None when unknown)
            recommendation: Current recommendation label shown to the hero
            lam: Current exploit weight
            history: Earlier turns of the conversation, oldest first

        Returns:
            Answer text

        Raises:
            ExternalAdviserError: On any transport problem or empty answer
        """
        system = self.build_chat_prompt(state, villain_stats or {}, recommendation, lam)
        turns = [{"role": m.role, "content": m.content} for m in history]

        answer = self._complete([{"type": "text", "text": question}], system=system, history=turns,
                                model=self.chat_model, max_tokens=self.chat_max_tokens).strip()
        if not answer:
            raise ExternalAdviserError("Empty chat answer from external adviser")
        return answer

    def build_chat_prompt(self, state: Optional[GameState], villain_stats: Dict[str, Optional[PlayerStats]],
                          recommendation: Optional[str], lam: float) -> str:
        """System prompt carrying the spot, villain reads and the current recommendation."""
        lines = []
        for villain in (state.villains if state is not None else []):
            stats = villain_stats.get(villain.player_id)
            seat = villain.position or '?'
            if stats is None:
                lines.append(f"  - {seat}: {villain.player_id} (no data)")
                continue
            af = f"{stats.aggression_factor:.2f}" if stats.aggression_factor is not None else 'N/A'
            lines.append(
                f"  - {seat} [{classify(stats)}] ({stats.sample_size} hands): VPIP={_fmt_ratio(stats.vpip)}, "
                f"PFR={_fmt_ratio(stats.pfr)}, AF={af}, Fold to 3bet={_fmt_ratio(stats.fold_to_3bet)}, "
                f"Fold to Cbet={_fmt_ratio(stats.fold_to_cbet)}, Stack={villain.stack_bb:g}bb"
            )

        if state is not None:
            spot = (
                f"- Street: {state.street}\n"
                f"- Hero position: {state.hero_position or 'unknown'}\n"
                f"- Hero cards: {' '.join(str(c) for c in state.hero_cards) or 'unknown'}\n"
                f"- Board: {' '.join(str(c) for c in state.board) or '(none)'}\n"
                f"- Pot: {state.pot_bb:.1f}bb\n"
                f"- To call: {state.to_call_bb:.1f}bb\n"
                f"- Hero stack: {state.stack_bb:.0f}bb\n"
                f"- Action history this street: {' -> '.join(state.action_history) or 'none'}"
            )
        else:
            spot = "- No hand in progress"

        return (
            "You are an expert poker coach giving real-time advice during a live hand. "
            "Be concise and direct, the hero is mid-hand.\n\n"
            f"## Current Hand State\n{spot}\n\n"
            f"## Villain Stats\n{chr(10).join(lines) or '  (no villain data)'}\n\n"
            f"## Current Recommendation\n{recommendation or 'none yet'}\n\n"
            f"## Strategy Mode\nlambda = {lam:.2f} ({strategy_mode(lam)}), the hero's GTO vs exploit dial.\n\n"
            "## Instructions\n"
            "- Answer the hero's question directly. Reference specific villain stats when relevant.\n"
            "- If asked about sizing deviations, explain the EV impact using the villain's fold/call tendencies.\n"
            "- Keep responses under 120 words. Skip pleasantries."
        )

    def _user_content(self, prompt: str, screenshot: Optional[str]) -> List[Dict[str, Any]]:
        if not screenshot:
            return [{"type": "text", "text": prompt}]

        return [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/jpeg",
                    "data": _DATA_URL.sub('', screenshot),
                },
            },
            {
                "type": "text",
                "text": (
                    "This is a live screenshot of the poker table. Use it as the source of truth "
                    "for hole cards, board, street, stacks, position, pot and amount to call; "
                    "the scraped values below are hints that may be stale.\n\n" + prompt
                ),
            },
        ]

    def _complete(self, content: List[Dict[str, Any]], system: Optional[str] = None,
                  history: Optional[List[Dict[str, Any]]] = None, model: Optional[str] = None,
                  max_tokens: Optional[int] = None) -> str:
        request: Dict[str, Any] = {
            'model': model or self.model,
            'max_tokens': max_tokens or self.max_tokens,
            'messages': list(history or []) + [{"role": "user", "content": content}],
            'timeout': self.timeout,
        }
        if system:
            request['system'] = system

        try:
            response = self.client.messages.create(**request)
        except anthropic.AnthropicError as e:
            logger.error(f"External adviser request failed: {e}")
            raise ExternalAdviserError(str(e)) from e

        blocks = getattr(response, 'content', None) or []
        first = blocks[0] if blocks else None
        if first is None or getattr(first, 'type', None) != 'text':
            raise ExternalAdviserError("External adviser returned no text")
        return first.text

    def _parse_response(self, text: str) -> Dict[str, Any]:
        cleaned = _FENCE.sub('', text.strip()).strip()
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"External adviser returned invalid JSON: {cleaned[:200]!r}")
            raise ExternalAdviserError(f"Invalid JSON from external adviser: {e}") from e

        if not isinstance(parsed, dict):
            raise ExternalAdviserError("External adviser response is not a JSON object")
        return parsed
