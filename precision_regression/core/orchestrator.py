"""
Cross-configuration regression run.

Runs the classifier on the synthetic logo for every (precision config,
backend) cell and checks the top-3 classes against golden data. The first
mismatch ends the run.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple, Type

from .adapter import InferenceEngine, RunConfig
from .comparison import GOLDEN_TOP3, check_top3
from .config_matrix import CANONICAL_CONFIGS, Backend, PrecisionConfig, iter_matrix
from .errors import RegressionCheckError
from .logo import SyntheticImage, generate_logo


class OrchestratorState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    FAILED = "failed"
    PASSED = "passed"


@dataclass
class TestOutcome:
    """Result of a full matrix run.

    Attributes:
        passed: True only if every cell matched on every rank
        cells_run: Number of (config, backend) cells executed
        config: Failing configuration
        backend: Failing backend
        rank: Failing rank
        kind: 'index' or 'score'
        expected: Golden value at the failing rank
        actual: Observed value at the failing rank
        message: Diagnostic line written to stderr
    """
    __test__ = False

    passed: bool
    cells_run: int = 0
    config: Optional[PrecisionConfig] = None
    backend: Optional[Backend] = None
    rank: Optional[int] = None
    kind: Optional[str] = None
    expected: Optional[float] = None
    actual: Optional[float] = None
    message: str = ""

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


def format_failure(config: PrecisionConfig, backend: Backend, error: RegressionCheckError) -> str:
    return (
        f"test_{config.name} {backend.value} failed {error} "
        f"{config.describe()}"
    )


class TestOrchestrator:
    """
    Drive the engine through the configuration matrix.

    Example:
        orchestrator = TestOrchestrator(NcnnEngine, RunConfig())
        outcome = orchestrator.run()
        sys.exit(outcome.exit_code)
    """
    __test__ = False

    def __init__(
        self,
        engine_cls: Type[InferenceEngine],
        run_config: Optional[RunConfig] = None,
        configs: Sequence[PrecisionConfig] = CANONICAL_CONFIGS,
        include_accelerated: bool = True,
        stream=None
    ):
        """
        Args:
            engine_cls: Adapter class; one instance is built per cell
            run_config: Model paths and input settings (defaults if None)
            configs: Precision configurations, in run order
            include_accelerated: Also run the accelerated backend when present
            stream: Where failure diagnostics go (stderr if None)
        """
        self.engine_cls = engine_cls
        self.run_config = run_config or RunConfig()
        self.configs = tuple(configs)
        self.include_accelerated = include_accelerated
        self.stream = stream

        self.state = OrchestratorState.PENDING
        self.current: Optional[Tuple[PrecisionConfig, Backend]] = None
        self._inputs: Dict[Tuple[int, int], SyntheticImage] = {}

    def _log(self, message: str):
        if self.run_config.verbose:
            print(f"  [{self.__class__.__name__}] {message}")

    def _input_image(self, width: int, height: int) -> SyntheticImage:
        key = (width, height)
        if key not in self._inputs:
            self._inputs[key] = generate_logo(self.run_config.pixel_layout, width, height)
        return self._inputs[key]

    def run_cell(self, config: PrecisionConfig, backend: Backend) -> None:
        """
        Run one (config, backend) cell with a fresh engine.

        Raises:
            ClassIndexMismatch: Wrong class at some rank
            ScoreToleranceExceeded: Score outside the config's tolerance
            EngineFailure: Propagated unchanged from the engine
        """
        size = self.run_config.input_size
        image = self._input_image(size, size)

        with self.engine_cls(config, backend) as engine:
            engine.load(self.run_config.param_path, self.run_config.model_path)
            scores = engine.classify(image, self.run_config)

        top = check_top3(scores, epsilon=config.epsilon, golden=GOLDEN_TOP3)
        self._log(
            f"{config.name} {backend.value} ok: "
            + ", ".join(f"{p.index}={p.score:.6f}" for p in top)
        )

    def run(self) -> TestOutcome:
        """
        Run every cell in order, stopping at the first mismatch.

        Returns:
            TestOutcome; on failure it describes the first failing cell
        """
        if self.state != OrchestratorState.PENDING:
            raise RuntimeError(f"Orchestrator already ran (state: {self.state.value})")

        accelerated = self.include_accelerated and self.engine_cls.has_accelerated_backend()
        self._log(
            f"engine={self.engine_cls.name} configs={len(self.configs)} "
            f"accelerated={'yes' if accelerated else 'no'}"
        )

        cells_run = 0
        for config, backend in iter_matrix(self.configs, accelerated):
            self.state = OrchestratorState.RUNNING
            self.current = (config, backend)
            cells_run += 1

            try:
                self.run_cell(config, backend)
            except RegressionCheckError as e:
                self.state = OrchestratorState.FAILED
                message = format_failure(config, backend, e)
                print(message, file=self.stream or sys.stderr)
                return TestOutcome(
                    passed=False,
                    cells_run=cells_run,
                    config=config,
                    backend=backend,
                    rank=e.rank,
                    kind=e.kind,
                    expected=e.expected,
                    actual=e.actual,
                    message=message,
                )
            except BaseException:
                # Engine errors end the run too; current keeps the failing cell
                self.state = OrchestratorState.FAILED
                raise

        self.state = OrchestratorState.PASSED
        self.current = None
        self._log(f"all {cells_run} cells passed")
        return TestOutcome(passed=True, cells_run=cells_run)
