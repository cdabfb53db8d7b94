import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .config import load_config
from .errors import RepositoryIdentifierError, SignerError
from .git_urls import parse_repository
from .graphql_client import GraphQLClient
from .logging_config import configure_logging
from .models import RepositoryRef
from .reference_store import LocalReferenceStore
from .remote_repo import GithubRemote
from .state import DEFAULT_MESSAGE, SignerDeps, SignerState
from .workflow import run_workflow
from .working_tree import WorkingTree

logger = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _repository(value: str) -> RepositoryRef:
    try:
        return parse_repository(value)
    except RepositoryIdentifierError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = _ArgumentParser(
        prog="github-signer",
        description="Push working tree changes as a signed commit via the GitHub GraphQL API.",
    )
    parser.add_argument(
        "-r",
        "--repository",
        required=True,
        type=_repository,
        help="the repository to push commits to (owner/name)",
    )
    parser.add_argument(
        "-b", "--branch", required=True, help="the branch to push commits to"
    )
    parser.add_argument(
        "-m", "--message", default=DEFAULT_MESSAGE, help="the commit message to use"
    )
    parser.add_argument(
        "-p",
        "--prmake",
        action="store_true",
        help="automatically raises a pull request if set",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level, force=True)
    try:
        config = load_config()
        tree = WorkingTree(".")
        deps = SignerDeps(
            remote=GithubRemote(GraphQLClient.from_config(config)),
            working_tree=tree,
            references=(
                LocalReferenceStore(tree.root, token=config.token)
                if config.tip_source == "local"
                else None
            ),
            config=config,
        )
        state = SignerState(
            repository=args.repository,
            branch=args.branch,
            message=args.message,
            open_pull_request=args.prmake,
        )
        asyncio.run(run_workflow(state, deps))
    except (SignerError, ValueError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
