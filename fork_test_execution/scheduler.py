"""Run the pre-fork and post-fork phases concurrently, each behind its height gate."""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List

from fork_test_logging import get_logger

from .poller import ChainPoller
from .registry import TestCaseRegistry
from .types import Phase, PhaseState

logger = get_logger(__name__)


class ForkWindowClosedError(Exception):
    """The chain already reached the fork height before the pre-fork phase started."""

    current_block: int
    post_fork_block: int

    def __init__(self, current_block: int, post_fork_block: int):
        """Initialize the error with the observed and the fork height."""
        super().__init__(current_block, post_fork_block)
        self.current_block = current_block
        self.post_fork_block = post_fork_block

    def __str__(self) -> str:
        """Return string representation of the error."""
        return (
            f"too late to run pre-fork checks: current block {self.current_block} is at or "
            f"after fork block {self.post_fork_block}"
        )


@dataclass
class PhaseResult:
    """Outcome of one phase."""

    phase: Phase
    state: PhaseState = PhaseState.IDLE
    passed_cases: List[str] = field(default_factory=list)
    failed_case: str | None = None
    error: Exception | None = None

    @property
    def passed(self) -> bool:
        """Return whether every case of the phase passed."""
        return self.state == PhaseState.PASSED

    def describe(self) -> str:
        """Return a one-line summary of the phase outcome."""
        if self.passed:
            return f"{self.phase}: {len(self.passed_cases)} cases passed"
        if self.failed_case is None:
            return f"{self.phase}: FAILED before running any case: {self.error}"
        return f"{self.phase}: {self.failed_case} FAILED: {self.error}"


@dataclass
class RunResult:
    """Outcome of both phases."""

    pre_fork: PhaseResult
    post_fork: PhaseResult

    @property
    def passed(self) -> bool:
        """Return whether both phases passed."""
        return self.pre_fork.passed and self.post_fork.passed

    @property
    def failures(self) -> List[PhaseResult]:
        """Return the results of the failed phases."""
        return [result for result in (self.pre_fork, self.post_fork) if not result.passed]


class PhaseScheduler:
    """
    Gate and run the two phases of a fork check.

    The pre-fork phase fails without running anything when the chain is already at the
    fork height, otherwise it waits for `pre_fork_block`. The post-fork phase waits for
    `post_fork_block`. Within a phase cases run in order and the first failure ends the
    phase; a failure never stops the other phase.
    """

    def __init__(
        self,
        poller: ChainPoller,
        *,
        pre_fork_block: int,
        post_fork_block: int,
        pre_fork_cases: TestCaseRegistry,
        post_fork_cases: TestCaseRegistry,
    ):
        """Initialize the scheduler with the gate heights and the case lists."""
        if pre_fork_block >= post_fork_block:
            raise ValueError(
                f"pre-fork block {pre_fork_block} must be lower than "
                f"post-fork block {post_fork_block}"
            )
        self.poller = poller
        self.pre_fork_block = pre_fork_block
        self.post_fork_block = post_fork_block
        self.cases: Dict[Phase, TestCaseRegistry] = {
            Phase.PRE_FORK: pre_fork_cases,
            Phase.POST_FORK: post_fork_cases,
        }
        self._states: Dict[Phase, PhaseState] = {phase: PhaseState.IDLE for phase in Phase}
        self._states_lock = threading.Lock()

    def state(self, phase: Phase) -> PhaseState:
        """Return the current state of `phase`."""
        with self._states_lock:
            return self._states[phase]

    def _set_state(self, result: PhaseResult, state: PhaseState) -> None:
        with self._states_lock:
            self._states[result.phase] = state
        result.state = state
        logger.verbose("%s phase is %s", result.phase, state.value)

    def await_gate(self, phase: Phase) -> int:
        """Block until `phase` may start and return the block number that opened the gate."""
        if phase == Phase.PRE_FORK:
            current = self.poller.block_number()
            if current >= self.post_fork_block:
                raise ForkWindowClosedError(current, self.post_fork_block)
            logger.info("Waiting for block %d to start pre-fork checks", self.pre_fork_block)
            return self.poller.wait_for_block_number(self.pre_fork_block)
        logger.info("Waiting for block %d to start post-fork checks", self.post_fork_block)
        return self.poller.wait_for_block_number(self.post_fork_block)

    def run_phase(self, phase: Phase) -> PhaseResult:
        """Gate and run one phase; failures are recorded in the result, not raised."""
        result = PhaseResult(phase=phase)
        self._set_state(result, PhaseState.AWAITING_GATE)
        try:
            block_number = self.await_gate(phase)
        except Exception as e:
            result.error = e
            self._set_state(result, PhaseState.FAILED)
            logger.fail("%s phase could not start: %s", phase, e)
            return result

        logger.info("Block %d reached, running %s checks", block_number, phase)
        self._set_state(result, PhaseState.RUNNING)
        for case in self.cases[phase]:
            logger.info("Running %s", case.name)
            try:
                case.validate()
            except Exception as e:
                result.failed_case = case.name
                result.error = e
                self._set_state(result, PhaseState.FAILED)
                logger.fail("%s FAILED: %s", case.name, e)
                return result
            result.passed_cases.append(case.name)
            logger.info("%s passed", case.name)

        self._set_state(result, PhaseState.PASSED)
        logger.info("All %s checks passed!", phase)
        return result

    def run(self) -> RunResult:
        """Run both phases on two threads and wait for both to finish."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="fork-check") as executor:
            futures = {phase: executor.submit(self.run_phase, phase) for phase in Phase}
            results = {phase: future.result() for phase, future in futures.items()}
        return RunResult(pre_fork=results[Phase.PRE_FORK], post_fork=results[Phase.POST_FORK])
