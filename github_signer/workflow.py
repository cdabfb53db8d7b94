from __future__ import annotations

import logging

from pydantic_graph import Graph

from .logging_config import ensure_logging_configured
from .state import SignerDeps, SignerState, SignResult
from .steps import (
    CheckBranch,
    CollectChanges,
    CreateBranch,
    OpenPullRequest,
    ResolveExistingTip,
    ResolveRepository,
    SubmitCommit,
)

logger = logging.getLogger(__name__)


def build_graph() -> Graph[SignerState, SignerDeps, SignResult]:
    return Graph(
        nodes=(
            CollectChanges,
            ResolveRepository,
            CheckBranch,
            CreateBranch,
            ResolveExistingTip,
            SubmitCommit,
            OpenPullRequest,
        ),
        name="github_signer",
    )


async def run_workflow(state: SignerState, deps: SignerDeps) -> SignResult:
    ensure_logging_configured()
    logger.info("Signing changes for %s on branch %s", state.repository, state.branch)
    result = await build_graph().run(CollectChanges(), state=state, deps=deps)
    return result.output
