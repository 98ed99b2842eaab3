"""Command line interface for Bracketkit.

Every subcommand operates on a JSON save file (``--store``). Run without
arguments, or with ``shell``, to get an interactive session with command
completion.
"""

# Bracketkit
# Copyright (C) 2025  Bracketkit developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import argparse
import logging
import shlex
import sys
import time
from typing import Dict, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import NestedCompleter, WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from bracketkit import __version__
from bracketkit.constants import DEFAULT_FORMAT, TOURNAMENT_FORMATS
from bracketkit.exceptions import BracketkitException
from bracketkit.models.tournament import Bracket, Match, Tournament
from bracketkit.services import (
    JsonFileRepository,
    StatusRefreshScheduler,
    TournamentService,
)
from bracketkit.settings import EngineSettings, load_settings
from bracketkit.utils import configure_logging, setup_logger

logger = setup_logger(__name__)

DEFAULT_STORE = "bracketkit.json"


# ANSI color codes for terminal output
class Colors:
    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


# Subcommands that take over the terminal and cannot run inside the shell
CLI_ONLY_COMMANDS = ("serve", "shell")

# Commands offered in the interactive shell with their options
COMMANDS = {
    "create": {
        "description": "Create a tournament",
        "options": {
            "--start": "Start date (ISO-8601)",
            "--end": "End date (ISO-8601)",
            "--max-teams": "Team capacity",
            "--format": "single-elimination/double-elimination/round-robin",
            "--game": "Game played",
            "--description": "Free text description",
            "--rules": "Rules text",
            "--prize-pool": "Prize pool text",
        },
    },
    "list": {"description": "List tournaments", "options": {}},
    "show": {"description": "Show a tournament and its bracket", "options": {}},
    "delete": {"description": "Delete a tournament and its matches", "options": {}},
    "register": {"description": "Register a team", "options": {}},
    "unregister": {"description": "Remove a team registration", "options": {}},
    "approve": {"description": "Confirm a registered team", "options": {}},
    "reject": {"description": "Reject a registered team", "options": {}},
    "withdraw": {"description": "Withdraw a team", "options": {}},
    "schedule": {"description": "Generate the match schedule", "options": {}},
    "bracket": {"description": "Generate the elimination bracket", "options": {}},
    "matches": {"description": "List the matches of a tournament", "options": {}},
    "score": {"description": "Record the final score of a match", "options": {}},
    "live": {"description": "Update one team's live score", "options": {}},
    "standings": {"description": "Show the standings table", "options": {}},
    "start": {"description": "Start a tournament", "options": {}},
    "end": {"description": "End a tournament", "options": {}},
    "cancel": {"description": "Cancel a tournament", "options": {}},
    "reset-override": {
        "description": "Return status control to the tournament dates",
        "options": {},
    },
    "recompute": {"description": "Refresh all date-driven statuses", "options": {}},
}


# ========== Output helpers ==========


def format_tournament(tournament: Tournament) -> str:
    mode = "manual" if tournament.manual_override else "auto"
    lines = [
        f"{tournament.name} [{tournament.id}]",
        f"  format:  {tournament.format}",
        f"  status:  {tournament.status} ({mode})",
        f"  dates:   {tournament.start_date.isoformat()} -> {tournament.end_date.isoformat()}",
        f"  teams:   {len(tournament.registered_teams)}/{tournament.max_teams}",
    ]
    if tournament.game:
        lines.append(f"  game:    {tournament.game}")
    if tournament.winner:
        lines.append(f"  winner:  {tournament.winner}")
    for registration in tournament.registered_teams:
        lines.append(f"    - {registration.team_id} ({registration.admission_status})")
    return "\n".join(lines)


def format_match(match: Match) -> str:
    line = (
        f"R{match.round} #{match.match_number:<3} {match.team1.team_id} "
        f"{match.team1.score}-{match.team2.score} {match.team2.team_id} "
        f"[{match.status}] {match.id}"
    )
    if match.winner:
        line += f" winner={match.winner}"
    return line


def format_bracket(bracket: Bracket) -> str:
    lines = [f"Bracket ({bracket.format}, {bracket.total_rounds} rounds)"]
    for bracket_round in bracket.rounds:
        lines.append(f"  Round {bracket_round.round}: {bracket_round.name}")
        for bracket_match in bracket_round.matches:
            marker = f" -> {bracket_match.winner}" if bracket_match.winner else ""
            lines.append(
                f"    {bracket_match.position}: {bracket_match.team1.name} vs "
                f"{bracket_match.team2.name} [{bracket_match.status}]{marker}"
            )
        if bracket_round.byes:
            byes = ", ".join(slot.name for slot in bracket_round.byes)
            lines.append(f"    byes: {byes}")
    return "\n".join(lines)


# ========== Command handlers ==========


def cmd_create(service: TournamentService, args: argparse.Namespace) -> int:
    tournament = service.create_tournament(
        name=args.name,
        start_date=args.start,
        end_date=args.end,
        max_teams=args.max_teams,
        format=args.format,
        game=args.game,
        description=args.description,
        rules=args.rules,
        prize_pool=args.prize_pool,
    )
    print(tournament.id)
    return 0


def cmd_list(service: TournamentService, args: argparse.Namespace) -> int:
    for tournament in service.list_tournaments():
        print(f"{tournament.id}  {tournament.status:10} {tournament.name}")
    return 0


def cmd_show(service: TournamentService, args: argparse.Namespace) -> int:
    tournament = service.get_tournament(args.tournament)
    print(format_tournament(tournament))
    if tournament.bracket is not None:
        print(format_bracket(tournament.bracket))
    return 0


def cmd_delete(service: TournamentService, args: argparse.Namespace) -> int:
    service.delete_tournament(args.tournament)
    print(f"Deleted {args.tournament}")
    return 0


def _team_command(method_name: str, verb: str):
    def handler(service: TournamentService, args: argparse.Namespace) -> int:
        getattr(service, method_name)(args.tournament, args.team)
        print(f"{verb} {args.team}")
        return 0

    return handler


def cmd_schedule(service: TournamentService, args: argparse.Namespace) -> int:
    for match in service.generate_schedule(args.tournament):
        print(format_match(match))
    return 0


def cmd_bracket(service: TournamentService, args: argparse.Namespace) -> int:
    print(format_bracket(service.generate_bracket(args.tournament)))
    return 0


def cmd_matches(service: TournamentService, args: argparse.Namespace) -> int:
    for match in service.get_matches(args.tournament):
        print(format_match(match))
    return 0


def cmd_score(service: TournamentService, args: argparse.Namespace) -> int:
    match = service.record_match_score(args.match, args.team1_score, args.team2_score)
    print(format_match(match))
    return 0


def cmd_live(service: TournamentService, args: argparse.Namespace) -> int:
    match = service.update_match_score(args.match, args.team, args.score)
    print(format_match(match))
    return 0


def cmd_standings(service: TournamentService, args: argparse.Namespace) -> int:
    print(f"{'#':>3}  {'team':<36} {'pts':>4} {'W':>3} {'L':>3}")
    for standing in service.get_standings(args.tournament):
        print(
            f"{standing.rank:>3}  {standing.team_id:<36} {standing.points:>4} "
            f"{standing.wins:>3} {standing.losses:>3}"
        )
    return 0


def _lifecycle_command(method_name: str):
    def handler(service: TournamentService, args: argparse.Namespace) -> int:
        tournament = getattr(service, method_name)(args.tournament)
        print(f"{tournament.name}: {tournament.status}")
        return 0

    return handler


def cmd_recompute(service: TournamentService, args: argparse.Namespace) -> int:
    result = service.recompute_all_statuses()
    print(f"Updated {result.updated} of {result.total} tournaments")
    return 0


def cmd_serve(service: TournamentService, args: argparse.Namespace) -> int:
    """Keep statuses current until interrupted."""
    scheduler = StatusRefreshScheduler(service, args.interval)
    with scheduler:
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            print("Stopping status refresh")
    return 0


# ========== Parsers ==========


def _add_tournament_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("tournament", help="Tournament ID")


def create_main_parser() -> argparse.ArgumentParser:
    """Create main argument parser."""
    parser = argparse.ArgumentParser(
        prog="bracketkit",
        description="Tournament registration, scheduling and brackets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  bracketkit shell

  # Create a tournament and register teams
  bracketkit create "Spring Cup" --start 2025-05-01T10:00 --end 2025-05-03T18:00 --max-teams 8
  bracketkit register tournament_1f2e... team-a

  # Start it and record a result
  bracketkit start tournament_1f2e...
  bracketkit score match_9ab3... 2 1
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--store", default=DEFAULT_STORE, help=f"Save file (default: {DEFAULT_STORE})"
    )
    parser.add_argument("--config", help="JSON file with engine settings")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_parser = subparsers.add_parser("create", help=COMMANDS["create"]["description"])
    create_parser.add_argument("name")
    create_parser.add_argument("--start", required=True)
    create_parser.add_argument("--end", required=True)
    create_parser.add_argument("--max-teams", type=int, required=True)
    create_parser.add_argument("--format", choices=TOURNAMENT_FORMATS, default=DEFAULT_FORMAT)
    create_parser.add_argument("--game")
    create_parser.add_argument("--description", default="")
    create_parser.add_argument("--rules", default="Standard tournament rules apply")
    create_parser.add_argument("--prize-pool", default="")
    create_parser.set_defaults(func=cmd_create)

    list_parser = subparsers.add_parser("list", help=COMMANDS["list"]["description"])
    list_parser.set_defaults(func=cmd_list)

    for name, handler in (
        ("show", cmd_show),
        ("delete", cmd_delete),
        ("schedule", cmd_schedule),
        ("bracket", cmd_bracket),
        ("matches", cmd_matches),
        ("standings", cmd_standings),
        ("start", _lifecycle_command("start_tournament")),
        ("end", _lifecycle_command("end_tournament")),
        ("cancel", _lifecycle_command("cancel_tournament")),
        ("reset-override", _lifecycle_command("reset_manual_override")),
    ):
        sub = subparsers.add_parser(name, help=COMMANDS[name]["description"])
        _add_tournament_arg(sub)
        sub.set_defaults(func=handler)

    for name, method_name, verb in (
        ("register", "register_team", "Registered"),
        ("unregister", "unregister_team", "Unregistered"),
        ("approve", "approve_team", "Approved"),
        ("reject", "reject_team", "Rejected"),
        ("withdraw", "withdraw_team", "Withdrew"),
    ):
        sub = subparsers.add_parser(name, help=COMMANDS[name]["description"])
        _add_tournament_arg(sub)
        sub.add_argument("team", help="Team ID")
        sub.set_defaults(func=_team_command(method_name, verb))

    score_parser = subparsers.add_parser("score", help=COMMANDS["score"]["description"])
    score_parser.add_argument("match", help="Match ID")
    score_parser.add_argument("team1_score", type=int)
    score_parser.add_argument("team2_score", type=int)
    score_parser.set_defaults(func=cmd_score)

    live_parser = subparsers.add_parser("live", help=COMMANDS["live"]["description"])
    live_parser.add_argument("match", help="Match ID")
    live_parser.add_argument("team", help="Team ID")
    live_parser.add_argument("score", type=int)
    live_parser.set_defaults(func=cmd_live)

    recompute_parser = subparsers.add_parser(
        "recompute", help=COMMANDS["recompute"]["description"]
    )
    recompute_parser.set_defaults(func=cmd_recompute)

    serve_parser = subparsers.add_parser(
        "serve", help="Refresh statuses periodically until interrupted"
    )
    serve_parser.add_argument(
        "--interval", type=int, help="Minutes between refreshes (default from settings)"
    )
    serve_parser.set_defaults(func=cmd_serve)

    subparsers.add_parser("shell", help="Interactive mode")

    return parser


def build_service(args: argparse.Namespace) -> TournamentService:
    """Create the service backed by the save file named on the command line."""
    settings = load_settings(args.config) if args.config else EngineSettings()
    return TournamentService(JsonFileRepository(args.store), settings=settings)


# ========== Interactive mode ==========


def print_banner(store: str) -> None:
    print(
        f"\n{Colors.OKBLUE}{Colors.BOLD}Bracketkit {__version__}{Colors.ENDC} "
        f"- store: {store}\n"
        f"Type {Colors.BOLD}help{Colors.ENDC} to see all available commands, "
        f"{Colors.BOLD}exit{Colors.ENDC} to leave\n"
    )


def print_commands_list() -> None:
    """Print list of all available commands."""
    print(f"\n{Colors.BOLD}Available Commands:{Colors.ENDC}\n")
    for cmd, info in COMMANDS.items():
        print(f"  {Colors.OKGREEN}{cmd:15}{Colors.ENDC} - {info['description']}")
    print(
        f"\n  {Colors.WARNING}{', '.join(CLI_ONLY_COMMANDS)} run only from the "
        f"command line, e.g. 'bracketkit serve'{Colors.ENDC}"
    )
    print()


def create_completer() -> NestedCompleter:
    """Create autocomplete completer for interactive mode."""
    completions: Dict[str, Optional[WordCompleter]] = {}
    for cmd, info in COMMANDS.items():
        completions[cmd] = (
            WordCompleter(list(info["options"].keys())) if info["options"] else None
        )
    completions["help"] = None
    completions["exit"] = None
    return NestedCompleter.from_nested_dict(completions)


def run_interactive_mode(service: TournamentService, store: str = DEFAULT_STORE) -> int:
    """Run commands against ``service`` until the user leaves."""
    print_banner(store)
    parser = create_main_parser()
    session = PromptSession(
        completer=create_completer(),
        history=InMemoryHistory(),
        style=Style.from_dict({"prompt": "#00aa00 bold"}),
    )

    while True:
        try:
            user_input = session.prompt("bracketkit> ").strip()
        except KeyboardInterrupt:
            print(f"\n{Colors.WARNING}Use 'exit' or 'quit' to leave{Colors.ENDC}")
            continue
        except EOFError:
            break

        if not user_input:
            continue
        if user_input in ("exit", "quit", "q"):
            break
        if user_input in ("help", "?"):
            print_commands_list()
            continue

        try:
            parts = shlex.split(user_input)
        except ValueError as e:
            print(f"{Colors.FAIL}Error: {e}{Colors.ENDC}")
            continue
        if parts[0] in CLI_ONLY_COMMANDS:
            print(
                f"{Colors.WARNING}'{parts[0]}' is only available from the "
                f"command line: bracketkit {parts[0]}{Colors.ENDC}"
            )
            continue
        if parts[0] not in COMMANDS:
            print(f"{Colors.FAIL}Unknown command: {parts[0]}{Colors.ENDC}")
            continue

        try:
            args = parser.parse_args(parts)
        except SystemExit:
            # argparse exits on bad arguments; stay in the shell
            continue
        try:
            args.func(service, args)
        except BracketkitException as e:
            print(f"{Colors.FAIL}Error: {e}{Colors.ENDC}")

    print(f"{Colors.OKGREEN}Goodbye!{Colors.ENDC}")
    return 0


# ========== Entry point ==========


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the bracketkit command."""
    parser = create_main_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        service = build_service(args)
        if args.command is None or args.command == "shell":
            return run_interactive_mode(service, args.store)
        return args.func(service, args)
    except BracketkitException as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
