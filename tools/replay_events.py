#!/usr/bin/env python3
"""
Replay a recorded event log through the advisor.

Reads one JSON event per line, applies them in order to a single session and
prints the resulting hand state and the advisor's decision for it. Useful for
reproducing a recommendation from a scraped session.

Lines that are blank or not valid JSON are skipped with a warning.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterator

from src.service.advisor_service import AdvisorService

logger = logging.getLogger(__name__)


def read_events(path: Path) -> Iterator[Any]:
    """Yield decoded JSON objects from a JSON lines file."""
    with open(path, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping line {line_number}: {e}")


def replay(service: AdvisorService, path: Path, session_id: str) -> int:
    """Apply every event in the file; returns the number of lines applied."""
    count = 0
    for event in read_events(path):
        service.apply_event(session_id, event)
        count += 1
    return count


def print_state(service: AdvisorService, session_id: str) -> None:
    state = service.get_hand_state(session_id)
    if state is None:
        print("No hand state (no events applied)")
        return

    print(f"Hand:     {state.hand_id or '-'}")
    print(f"Street:   {state.street}")
    print(f"Hero:     {state.hero_position or '-'} {' '.join(str(c) for c in state.hero_cards) or '-'}")
    print(f"Board:    {' '.join(str(c) for c in state.board) or '-'}")
    print(f"Pot:      {state.pot_bb:g}bb")
    for player in state.players:
        status = 'active' if player.active else 'folded'
        print(f"  {player.position or '?':>4} {player.name or player.id[:8]} "
              f"{player.stack_bb:g}bb ({status})")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Replay a JSON lines event log and print the advisor's decision",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tools.replay_events hand.jsonl
  python -m tools.replay_events hand.jsonl --lambda 0.8 --to-call 3
  python -m tools.replay_events hand.jsonl --db /tmp/replay.db --session table-2
        """
    )

    parser.add_argument('events', type=Path, help='JSON lines file, one event per line')
    parser.add_argument('--session', '-s', default='replay', help='Session id (default: replay)')
    parser.add_argument('--lambda', '-l', dest='lam', type=float, default=0.5,
                        help='Exploit weight in [0, 1] (default: 0.5)')
    parser.add_argument('--db', help='SQLite database path (default: from settings)')
    parser.add_argument('--to-call', type=float, default=0.0, help='Amount hero faces in bb (default: 0)')
    parser.add_argument('--stack', type=float, default=100.0, help='Hero stack in bb (default: 100)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)8s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if not args.events.exists():
        print(f"Event file not found: {args.events}", file=sys.stderr)
        return 1

    service = AdvisorService(db_path=args.db)
    try:
        count = replay(service, args.events, args.session)
        print(f"Applied {count} events to session {args.session}\n")
        print_state(service, args.session)

        state = service.get_hand_state(args.session)
        if state is None:
            return 0

        decision = service.get_decision(state, args.lam, to_call_bb=args.to_call, stack_bb=args.stack)
        print()
        if decision is None:
            print("No recommendation available (hero cards unknown)")
            return 0

        print(f"Decision:   {decision.label} ({decision.source})")
        print(f"GTO:        {decision.gto_action}")
        print(f"Exploit:    {decision.exploit_action}")
        print(f"Confidence: {decision.confidence:.2f} (effective lambda {decision.effective_lambda:.2f})")
        print(f"Reasoning:  {decision.reasoning}")
        return 0
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())
