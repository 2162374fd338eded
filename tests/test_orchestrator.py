"""
Tests for the cross-configuration orchestrator, driven by fake engines.
"""

import io

import pytest

from precision_regression.core.adapter import RunConfig
from precision_regression.core.config_matrix import CANONICAL_CONFIGS, Backend
from precision_regression.core.errors import EngineFailure
from precision_regression.core.logo import PixelLayout
from precision_regression.core.orchestrator import OrchestratorState, TestOrchestrator


def fail_config(name, index=920):
    """Mutation that knocks ``index`` out of the top 3 for config ``name``."""
    def mutate(scores, config, backend):
        if config.name == name:
            scores[index] = 0.0
    return mutate


class TestOrchestratorPass:
    """Runs where every cell matches."""

    def test_all_cells_pass(self, make_engine):
        engine_cls = make_engine()
        orchestrator = TestOrchestrator(engine_cls, RunConfig(), stream=io.StringIO())

        outcome = orchestrator.run()

        assert outcome.passed
        assert outcome.exit_code == 0
        assert outcome.cells_run == 4
        assert orchestrator.state == OrchestratorState.PASSED

    def test_accelerated_backend_doubles_cells(self, make_engine):
        engine_cls = make_engine(accelerated=True)
        outcome = TestOrchestrator(engine_cls).run()

        assert outcome.passed
        assert outcome.cells_run == 8
        backends = [e.backend for e in engine_cls.instances]
        assert backends == [Backend.REFERENCE, Backend.ACCELERATED] * 4

    def test_accelerated_backend_can_be_disabled(self, make_engine):
        engine_cls = make_engine(accelerated=True)
        outcome = TestOrchestrator(engine_cls, include_accelerated=False).run()

        assert outcome.cells_run == 4
        assert all(e.backend == Backend.REFERENCE for e in engine_cls.instances)

    def test_fresh_engine_per_cell(self, make_engine):
        engine_cls = make_engine()
        run_config = RunConfig(param_path="a.param", model_path="a.bin")
        TestOrchestrator(engine_cls, run_config).run()

        instances = engine_cls.instances
        assert len(instances) == 4
        assert len({id(e) for e in instances}) == 4
        assert [e.config for e in instances] == list(CANONICAL_CONFIGS)
        for engine in instances:
            assert engine.loaded_from == ("a.param", "a.bin")
            assert engine.closed

    def test_engine_receives_fixed_input(self, make_engine):
        engine_cls = make_engine()
        TestOrchestrator(engine_cls).run()

        first = engine_cls.instances[0]
        assert first.image.width == 227
        assert first.image.height == 227
        assert first.image.layout == PixelLayout.BGR
        name, blob = first.seen_inputs[0]
        assert name == "data"
        assert blob.shape == (3, 227, 227)
        # logo is synthesized once and shared by every cell
        assert all(e.image is first.image for e in engine_cls.instances)

    def test_verbose_progress(self, make_engine, capsys):
        TestOrchestrator(make_engine(), RunConfig(verbose=True)).run()
        out = capsys.readouterr().out
        assert "[TestOrchestrator]" in out
        assert "all 4 cells passed" in out


class TestOrchestratorFailure:
    """Runs that stop at the first mismatch."""

    def test_short_circuit_on_second_config(self, make_engine):
        engine_cls = make_engine(mutate=fail_config("packed-fp16"))
        stream = io.StringIO()
        orchestrator = TestOrchestrator(engine_cls, stream=stream)

        outcome = orchestrator.run()

        assert not outcome.passed
        assert outcome.exit_code == 1
        assert outcome.cells_run == 2
        assert [e.config.name for e in engine_cls.instances] == ["baseline", "packed-fp16"]
        assert orchestrator.state == OrchestratorState.FAILED
        assert orchestrator.current == (CANONICAL_CONFIGS[1], Backend.REFERENCE)

        assert outcome.config == CANONICAL_CONFIGS[1]
        assert outcome.backend == Backend.REFERENCE
        assert outcome.rank == 1
        assert outcome.kind == "index"
        assert outcome.expected == 920
        assert outcome.actual == 716

        diagnostic = stream.getvalue()
        assert diagnostic.count("\n") == 1
        assert CANONICAL_CONFIGS[1].describe() in diagnostic
        assert "top 1 index not match  expect 920 but got 716" in diagnostic

    def test_failed_engine_is_still_closed(self, make_engine):
        engine_cls = make_engine(mutate=fail_config("baseline"))
        TestOrchestrator(engine_cls, stream=io.StringIO()).run()
        assert engine_cls.instances[0].closed

    def test_diagnostic_goes_to_stderr_by_default(self, make_engine, capsys):
        TestOrchestrator(make_engine(mutate=fail_config("baseline"))).run()
        captured = capsys.readouterr()
        assert "test_baseline cpu failed" in captured.err
        assert captured.out == ""

    def test_score_drift_fails_only_full_precision(self, make_engine):
        """A 0.05 drift breaks the 0.01 baseline tolerance but not 0.1."""
        def drift(scores, config, backend):
            scores[532] += 0.05

        engine_cls = make_engine(mutate=drift)
        outcome = TestOrchestrator(engine_cls, stream=io.StringIO()).run()
        assert not outcome.passed
        assert outcome.kind == "score"
        assert outcome.rank == 0
        assert outcome.cells_run == 1

        reduced_only = TestOrchestrator(
            make_engine(mutate=drift), configs=CANONICAL_CONFIGS[1:], stream=io.StringIO()
        ).run()
        assert reduced_only.passed

    def test_accelerated_failure_after_reference_pass(self, make_engine):
        def gpu_only(scores, config, backend):
            if backend == Backend.ACCELERATED and config.name == "all-reduced":
                scores[716] = 0.0

        engine_cls = make_engine(mutate=gpu_only, accelerated=True)
        outcome = TestOrchestrator(engine_cls, stream=io.StringIO()).run()

        assert not outcome.passed
        assert outcome.cells_run == 6
        assert outcome.backend == Backend.ACCELERATED
        assert outcome.config.name == "all-reduced"
        assert outcome.rank == 2

    def test_engine_failure_propagates(self, make_engine):
        engine_cls = make_engine()

        failure = EngineFailure("cannot open model")

        def broken_load(self, param_path, model_path):
            raise failure

        engine_cls.load = broken_load
        orchestrator = TestOrchestrator(engine_cls)

        with pytest.raises(EngineFailure) as exc_info:
            orchestrator.run()

        # Passed through untouched and the run still ends in a terminal state
        assert exc_info.value is failure
        assert orchestrator.state == OrchestratorState.FAILED
        assert orchestrator.current == (CANONICAL_CONFIGS[0], Backend.REFERENCE)
        assert engine_cls.instances[0].closed

    def test_engine_failure_on_later_cell_is_terminal(self, make_engine):
        def extract_fails_on_third(scores, config, backend):
            if config.name == "all-reduced":
                raise EngineFailure("extract failed")

        engine_cls = make_engine(mutate=extract_fails_on_third)
        orchestrator = TestOrchestrator(engine_cls)

        with pytest.raises(EngineFailure):
            orchestrator.run()

        assert orchestrator.state == OrchestratorState.FAILED
        assert orchestrator.current[0].name == "all-reduced"
        assert len(engine_cls.instances) == 3

    def test_run_is_single_shot(self, make_engine):
        orchestrator = TestOrchestrator(make_engine())
        orchestrator.run()
        with pytest.raises(RuntimeError):
            orchestrator.run()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
