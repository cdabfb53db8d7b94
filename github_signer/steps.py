from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, TypeVar

from pydantic_graph import BaseNode, End, GraphRunContext

from .errors import ReferenceLookupError, SignerError
from .models import BranchTarget, CommitRequest, PullRequestRequest
from .state import SignerDeps, SignerState, SignResult
from .working_tree import collect_changes

logger = logging.getLogger(__name__)

Ctx = GraphRunContext[SignerState, SignerDeps]

T = TypeVar("T")


def _require(value: Optional[T], what: str) -> T:
    if value is None:
        raise SignerError(f"{what} has not been resolved")
    return value


@dataclass
class CollectChanges(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> ResolveRepository | End[SignResult]:
        tree = ctx.deps.working_tree
        ctx.state.changes = collect_changes(tree.status(), tree.root)
        if not ctx.state.changes:
            logger.info("[collect] nothing to commit, exiting")
            return End(SignResult.from_state(ctx.state))
        return ResolveRepository()


@dataclass
class ResolveRepository(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> CheckBranch:
        ctx.state.remote = ctx.deps.remote.resolve(
            ctx.state.repository, base_branch=ctx.deps.config.base_branch
        )
        return CheckBranch()


@dataclass
class CheckBranch(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> CreateBranch | ResolveExistingTip:
        ctx.state.existing_branch = ctx.deps.remote.find_branch(
            ctx.state.repository, ctx.state.branch
        )
        if ctx.state.existing_branch is None:
            return CreateBranch()
        return ResolveExistingTip()


@dataclass
class CreateBranch(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> SubmitCommit:
        remote = _require(ctx.state.remote, "repository state")
        base_oid = remote.default_branch_tip_oid
        ctx.deps.remote.create_branch(remote.repository_id, ctx.state.branch, base_oid)
        ctx.state.created_branch = True
        ctx.state.target = BranchTarget(name=ctx.state.branch, base_oid=base_oid)
        return SubmitCommit()


@dataclass
class ResolveExistingTip(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> SubmitCommit:
        branch = ctx.state.branch
        if ctx.deps.config.tip_source == "local":
            oid = _refresh_local_tip(ctx.deps, branch)
        else:
            existing = _require(ctx.state.existing_branch, "existing branch")
            oid = existing.oid
        if not oid:
            raise ReferenceLookupError(f"unable to find HEAD for branch {branch}")
        logger.info("[branch] %s is at %s", branch, oid)
        ctx.state.target = BranchTarget(name=branch, base_oid=oid)
        return SubmitCommit()


def _refresh_local_tip(deps: SignerDeps, branch: str) -> str:
    refs = deps.references
    if refs is None:
        raise ReferenceLookupError("local tip source needs a local checkout")
    try:
        refs.fetch()
    except Exception as exc:
        if deps.config.strict_refresh:
            raise ReferenceLookupError(
                f"unable to refresh origin/{branch}: {exc}"
            ) from exc
        logger.warning(
            "[branch] fetch failed, using local origin/%s as is: %s", branch, exc
        )
    return refs.lookup(branch)


@dataclass
class SubmitCommit(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> OpenPullRequest | End[SignResult]:
        target = _require(ctx.state.target, "branch target")
        request = CommitRequest(
            repository=ctx.state.repository,
            branch=target.name,
            message=ctx.state.message,
            changes=ctx.state.changes,
            expected_head_oid=target.base_oid,
        )
        logger.info(
            "[commit] committing %d file(s) to %s on top of %s",
            len(request.changes),
            request.branch,
            request.expected_head_oid,
        )
        ctx.state.commit = ctx.deps.remote.create_commit(request)
        if ctx.state.open_pull_request:
            return OpenPullRequest()
        return End(SignResult.from_state(ctx.state))


@dataclass
class OpenPullRequest(BaseNode[SignerState, SignerDeps, SignResult]):
    async def run(self, ctx: Ctx) -> End[SignResult]:
        remote = _require(ctx.state.remote, "repository state")
        ctx.state.pull_request = ctx.deps.remote.open_pull_request(
            PullRequestRequest(
                repository_id=remote.repository_id,
                base=remote.default_branch_name,
                head=ctx.state.branch,
                title=ctx.state.message,
            )
        )
        return End(SignResult.from_state(ctx.state))
