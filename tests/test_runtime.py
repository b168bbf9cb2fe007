"""Test the run loop (executor) and the interpreter facade."""
import pytest
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from conftest import ins
from glyphvm.errors import ConfigurationError, StepLimitExceeded
from glyphvm.runtime.environment import BufferedIO
from glyphvm.runtime.executor import ExecutionConfig, ExecutionResult, Executor, RunStatus
from glyphvm.runtime.interpreter import Interpreter
from glyphvm.runtime.program import CombineOp, OpKind, Program


class TestExecutionConfig:
    """Tests for ExecutionConfig."""

    def test_defaults(self):
        config = ExecutionConfig()
        assert config.numeric_backend == "arbitrary"
        assert config.bounded_bits == 64
        assert config.max_steps is None
        assert config.trace is False

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            ExecutionConfig(numeric_backend="float")

    def test_bad_width(self):
        with pytest.raises(ConfigurationError):
            ExecutionConfig(numeric_backend="bounded", bounded_bits=48)

    def test_bad_max_steps(self):
        with pytest.raises(ConfigurationError):
            ExecutionConfig(max_steps=0)

    def test_from_dict(self):
        config = ExecutionConfig.from_dict({"numeric_backend": "bounded", "bounded_bits": 16})
        assert config.create_backend().max_value == 32767

    def test_from_dict_unknown_option(self):
        with pytest.raises(ConfigurationError):
            ExecutionConfig.from_dict({"optimize": True})

    @pytest.mark.parametrize("options", [
        {"max_steps": "lots"},
        {"max_steps": 2.5},
        {"max_steps": True},
        {"numeric_backend": "bounded", "bounded_bits": 16.0},
        {"numeric_backend": ["bounded"]},
        {"trace": "yes"},
        {"include_state": 1},
    ])
    def test_from_dict_wrong_types(self, options):
        with pytest.raises(ConfigurationError):
            ExecutionConfig.from_dict(options)


class TestExecutor:
    """Tests for pointer resolution and run results."""

    def run(self, instructions, text="", **options):
        io = BufferedIO(text)
        result = Executor(ExecutionConfig(**options)).execute(Program(instructions), io)
        return result, io.output

    def test_empty_program_completes(self):
        result, _ = self.run([])
        assert result.status is RunStatus.COMPLETED
        assert result.curses == 0
        assert result.steps == 0

    def test_walking_off_the_end_completes(self):
        result, output = self.run([ins(OpKind.PUSH, 1, 5), ins(OpKind.OUTPUT_NUMBER, 1)])
        assert result.completed
        assert result.curses == 0
        assert result.steps == 2
        assert output == "5"

    def test_terminate_stops_early(self):
        result, output = self.run([
            ins(OpKind.TERMINATE),
            ins(OpKind.OUTPUT_NUMBER, 1),
        ])
        assert result.completed
        assert result.steps == 1
        assert output == ""
        assert result.curses == 0

    def test_jump_to_length_halts_normally(self):
        result, _ = self.run([ins(OpKind.JUMP_ALWAYS, 0, 2), ins(OpKind.OUTPUT_NUMBER, 1)])
        assert result.completed
        assert result.curses == 0
        assert result.steps == 1

    def test_invalid_jump_aborts(self):
        result, output = self.run([
            ins(OpKind.PUSH, 1, 1),
            ins(OpKind.JUMP_ALWAYS, 0, 3),
            ins(OpKind.OUTPUT_NUMBER, 1),
        ])
        assert result.status is RunStatus.ABORTED
        assert result.reason == "invalid-jump-target"
        assert result.at_index == 1
        assert result.steps == 2
        assert output == ""

    def test_abort_keeps_curses_so_far(self):
        result, _ = self.run([
            ins(OpKind.OUTPUT_NUMBER, 1),
            ins(OpKind.JUMP_IF_NONPOSITIVE, 2, 99),
        ])
        assert result.status is RunStatus.ABORTED
        assert result.at_index == 1
        assert result.curses == 2

    def test_conditional_not_taken_is_not_validated(self):
        result, _ = self.run([
            ins(OpKind.PUSH, 1, 1),
            ins(OpKind.JUMP_IF_NONPOSITIVE, 1, 99),
        ])
        assert result.completed

    def test_countdown_loop(self, countdown_program):
        io = BufferedIO()
        result = Executor().execute(countdown_program, io)
        assert io.output == "321"
        assert result.completed
        assert result.curses == 0
        assert result.steps == 33

    def test_runs_do_not_share_state(self):
        executor = Executor(ExecutionConfig(include_state=True))
        program = Program([ins(OpKind.PUSH, 1, 1), ins(OpKind.TRANSFER_FROM_QUEUE, 2)])
        first = executor.execute(program, BufferedIO())
        second = executor.execute(program, BufferedIO())
        assert first.curses == second.curses == 1
        assert first.final_state == second.final_state == {
            "stacks": {"1": ["1"], "2": ["0"]},
            "queue": [],
            "curses": 1,
        }

    def test_bounded_and_arbitrary_diverge_on_overflow(self):
        program = [
            ins(OpKind.PUSH, 1, 2 ** 63 - 1),
            ins(OpKind.INPUT_NUMBER, 2),
            ins(OpKind.COMBINE, 2, combine=CombineOp.ADD),
            ins(OpKind.OUTPUT_NUMBER, 2),
        ]
        bounded, bounded_out = self.run(program, "1", numeric_backend="bounded")
        exact, exact_out = self.run(program, "1")
        assert bounded.curses == 1
        assert bounded_out == "0"
        assert exact.curses == 0
        assert exact_out == str(2 ** 63)

    def test_step_limit(self):
        with pytest.raises(StepLimitExceeded) as excinfo:
            self.run([ins(OpKind.JUMP_ALWAYS, 0, 0)], max_steps=10)
        assert excinfo.value.max_steps == 10
        assert excinfo.value.ip == 0

    def test_result_to_dict(self):
        result, _ = self.run([ins(OpKind.TRANSFER_FROM_QUEUE, 1)])
        data = result.to_dict()
        assert data["status"] == "COMPLETED"
        assert data["curses"] == 1
        assert data["backend"] == {"numeric_backend": "arbitrary"}
        assert data["program_digest"].startswith("sha256:")

    def test_result_constructors(self):
        done = ExecutionResult.completed_with(3)
        failed = ExecutionResult.aborted_with("invalid-jump-target", 7, 0)
        assert done.completed and done.curses == 3
        assert not failed.completed and failed.at_index == 7


class TestInterpreter:
    """Tests for the Interpreter facade."""

    def test_run_buffered(self, countdown_program):
        report = Interpreter().run_buffered(countdown_program)
        assert report.output == "321"
        assert report.trace == []
        assert report.to_dict()["output"] == "321"

    def test_trace_records_every_step(self):
        program = Program([
            ins(OpKind.OUTPUT_NUMBER, 1),
            ins(OpKind.JUMP_ALWAYS, 0, 3),
            ins(OpKind.PUSH, 1, 1),
        ])
        interpreter = Interpreter(ExecutionConfig(trace=True))
        report = interpreter.run_buffered(program)
        assert [e.instruction for e in report.trace] == ["OUTPUT_NUMBER", "JUMP_ALWAYS"]
        assert [e.curses for e in report.trace] == [1, 1]
        assert report.trace[1].update == "JUMP_TO"
        assert report.trace[1].target == 3
        assert len(report.to_dict()["trace"]) == 2

    def test_trace_resets_between_runs(self):
        program = Program([ins(OpKind.PUSH, 1, 1)])
        interpreter = Interpreter(ExecutionConfig(trace=True))
        interpreter.run_buffered(program)
        interpreter.run_buffered(program)
        assert len(interpreter.get_trace()) == 1
