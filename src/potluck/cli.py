"""Command line entry point.

Maintain and manage a set of recipes in git.

Run with: potluck --help
Repository directory: --dir, else $POTLUCK_DIR, else the current directory.
"""

import argparse
import sys

from potluck import __version__
from potluck import commands
from potluck.config import get_settings
from potluck.exceptions import PotluckError, RollbackFailed
from potluck.logging_config import LoggingContext, configure_logging, get_logger
from potluck.repository import RecipeRepository

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="potluck",
        description="Maintain and manage a set of recipes in git.",
    )
    parser.add_argument("--version", action="version", version=f"potluck {__version__}")
    parser.add_argument("-C", "--dir", help="Recipe repository directory")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")

    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    # Managing commands
    p = sub.add_parser("init", help="Create a new git repo with recipes in it")
    p.add_argument("repo_dir", nargs="?", help="Directory to initialize")

    # Single recipes
    p = sub.add_parser("add", help="Add a new recipe and launch editor")
    p.add_argument("name")
    p.add_argument("path", nargs="?", help="Existing recipe file to import")
    p.add_argument("-i", "--image", action="append", default=[], help="Path to an image file")
    p.add_argument("-f", "--force", action="store_true", help="Disable safeguards")
    p.add_argument("-q", "--quiet", action="store_true", help="Do not launch the editor")

    p = sub.add_parser("edit", help="Edit an existing recipe")
    p.add_argument("name")

    p = sub.add_parser("mv", help="Rename an existing recipe")
    p.add_argument("name")
    p.add_argument("new_name")
    p.add_argument("-f", "--force", action="store_true", help="Disable safeguards")

    p = sub.add_parser("rm", help="Remove an existing recipe")
    p.add_argument("name")

    # Listing and viewing
    p = sub.add_parser("list", help="List all known recipes")
    p.add_argument("--images", action="store_true", help="List also all images")

    p = sub.add_parser(
        "grocery", help="Create a sorted & merged item list for the next supermarket visit"
    )
    p.add_argument("names", nargs="*")
    p.add_argument("--plan", dest="plans", nargs="+", default=[], help="Plan files")
    p.add_argument("--persons", type=int, help="For how many persons you want to cook")

    p = sub.add_parser("plan", help="Create a food plan")
    p.add_argument("start", nargs="?", help="First day, YYYY-MM-DD")
    p.add_argument("end", nargs="?", help="Last day, YYYY-MM-DD")

    p = sub.add_parser("cook", help="Step-by-step instructions")
    p.add_argument("name")
    p.add_argument("--persons", type=int, help="For how many persons you want to cook")

    p = sub.add_parser("serve", help="Show a gallery of recipes on localhost")
    p.add_argument("--host")
    p.add_argument("--port", type=int)

    return parser


def run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command line. Raises PotluckError/OSError on failure."""
    settings = get_settings()
    repo_dir = args.dir or settings.dir

    if args.command == "init":
        commands.handle_init(args.repo_dir or repo_dir, settings=settings)
        return 0

    repo = RecipeRepository(repo_dir, settings=settings).open()

    if args.command == "add":
        commands.handle_add(
            repo,
            args.name,
            path=args.path,
            images=args.image,
            force=args.force,
            quiet=args.quiet,
        )
    elif args.command == "edit":
        commands.handle_edit(repo, args.name)
    elif args.command == "mv":
        commands.handle_move(repo, args.name, args.new_name, force=args.force)
    elif args.command == "rm":
        commands.handle_remove(repo, args.name)
    elif args.command == "list":
        for line in commands.handle_list(repo, show_images=args.images):
            print(line)
    elif args.command == "grocery":
        if not args.names and not args.plans:
            raise PotluckError("Name at least one recipe or pass --plan")
        for line in commands.handle_grocery(
            repo, names=args.names, plans=args.plans, persons=args.persons
        ):
            print(line)
    elif args.command == "plan":
        sys.stdout.write(commands.handle_plan(repo, start=args.start, end=args.end))
    elif args.command == "cook":
        commands.handle_cook(repo, args.name, persons=args.persons)
    elif args.command == "serve":
        commands.handle_serve(repo, host=args.host, port=args.port)

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    configure_logging(args.log_level or settings.log_level, json_format=settings.json_logs)

    with LoggingContext(command=args.command, recipe=getattr(args, "name", None)):
        try:
            return run(args)
        except RollbackFailed as e:
            logger.critical(f"Repository left in an undefined state: {e}")
            print(f"Error: {e}. Abort.", file=sys.stderr)
            return 1
        except (PotluckError, OSError) as e:
            print(f"Error: {e}. Abort.", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
