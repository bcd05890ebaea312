"""Command-line front end: ``psnapi profile``, ``psnapi friends`` and so on."""
import argparse
import logging
import sys
from typing import List, Optional

from colorama import Fore, Style, init

from .api import Community, User
from .client import Client
from .config import load_config, setup_logging
from .errors import PSNError

logger = logging.getLogger(__name__)


def _user(client: Client, online_id: Optional[str]) -> User:
    return User(client, online_id)


def cmd_profile(client: Client, args: argparse.Namespace) -> None:
    info = _user(client, args.online_id).info()
    print(f"{Fore.CYAN}{Style.BRIGHT}{info.online_id}{Style.RESET_ALL}")
    if info.about_me:
        print(f"{Fore.WHITE}{info.about_me}")
    print(f"{Fore.GREEN}Followers: {Fore.WHITE}{info.follower_count}")
    print(f"{Fore.GREEN}Friends:   {Fore.WHITE}{info.friends_count}")
    print(f"{Fore.GREEN}Verified:  {Fore.WHITE}{'yes' if info.is_officially_verified else 'no'}")
    print(f"{Fore.GREEN}Status:    {Fore.WHITE}{info.primary_online_status}")


def cmd_friends(client: Client, args: argparse.Namespace) -> None:
    friends = _user(client, args.online_id).friends(filter=args.filter, limit=args.limit)
    if not friends:
        print(f"{Fore.YELLOW}No friends found.")
    for friend in friends:
        print(f"{Fore.WHITE}{friend.online_id_parameter()}")


def cmd_games(client: Client, args: argparse.Namespace) -> None:
    games = _user(client, args.online_id).games(limit=args.limit)
    if not games:
        print(f"{Fore.YELLOW}No games found.")
    for game in games:
        played = game.last_played() or ''
        print(f"{Fore.CYAN}{game.title_id():<14}{Fore.WHITE} {game.name()}  {Fore.YELLOW}{played}")


def cmd_communities(client: Client, args: argparse.Namespace) -> None:
    communities = _user(client, args.online_id).communities()
    if not communities:
        print(f"{Fore.YELLOW}No communities found.")
    for community in communities:
        info = community.info()
        print(f"{Fore.CYAN}{info.id}{Fore.WHITE} {info.name} {Fore.YELLOW}({info.member_count} members)")


def cmd_members(client: Client, args: argparse.Namespace) -> None:
    community = Community(client, args.community_id)
    members = community.member_pages(limit=args.limit) if args.all else community.members(limit=args.limit)
    count = 0
    for member in members:
        print(f"{Fore.WHITE}{member.online_id_parameter()}")
        count += 1
    print(f"{Fore.GREEN}{count} member(s)")


def cmd_story(client: Client, args: argparse.Namespace) -> None:
    stories = _user(client, args.online_id).story(page=args.page)
    if not stories:
        print(f"{Fore.YELLOW}No activity found.")
    for story in stories:
        print(f"{Fore.YELLOW}{story.date() or '':<26}{Fore.WHITE} {story.caption()}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='psnapi',
        description='psnapi - PlayStation Network profile, friends and community browser',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  psnapi profile                     # Show your own profile
  psnapi profile SomeOnlineId        # Show another user's profile
  psnapi friends --limit 10          # List up to 10 online friends
  psnapi members COMMUNITY_ID --all  # List every member of a community
        """
    )
    parser.add_argument(
        '--config', '-c',
        default='config.json',
        help='Path to config file (default: config.json)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        help='Override the configured log level (DEBUG, INFO, WARNING, ...)'
    )
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('profile', help='Show a profile')
    p.add_argument('online_id', nargs='?', help='Online ID (default: your account)')
    p.set_defaults(func=cmd_profile)

    p = sub.add_parser('friends', help='List friends')
    p.add_argument('online_id', nargs='?')
    p.add_argument('--filter', default='online', help='Presence filter (default: online)')
    p.add_argument('--limit', type=int, default=36, metavar='N')
    p.set_defaults(func=cmd_friends)

    p = sub.add_parser('games', help='List played games')
    p.add_argument('online_id', nargs='?')
    p.add_argument('--limit', type=int, default=100, metavar='N')
    p.set_defaults(func=cmd_games)

    p = sub.add_parser('communities', help='List communities')
    p.add_argument('online_id', nargs='?')
    p.set_defaults(func=cmd_communities)

    p = sub.add_parser('members', help='List community members')
    p.add_argument('community_id')
    p.add_argument('--limit', type=int, default=100, metavar='N', help='Page size (max 100)')
    p.add_argument('--all', action='store_true', help='Follow pagination through every page')
    p.set_defaults(func=cmd_members)

    p = sub.add_parser('story', help='Show the activity feed')
    p.add_argument('online_id', nargs='?')
    p.add_argument('--page', type=int, default=0)
    p.set_defaults(func=cmd_story)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    init(autoreset=True)
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        setup_logging(args.log_level or config.get('log_level', 'WARNING'))
        with Client.from_config(config) as client:
            args.func(client, args)
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted by user. Goodbye!")
        return 130
    except PSNError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"{Fore.RED}Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
