"""Tests for the decompiler service."""

import httpx
import pytest

from pyretdec import (
    ArtifactKind,
    DecompilationArguments,
    InvalidArgumentsError,
    JobFailedError,
    JobHandle,
    JobKind,
    JobState,
    MalformedResponseError,
    NotReadyError,
    RetdecAPIError,
    UnsupportedArtifactError,
)

DECOMPILATIONS = "/decompiler/decompilations"
STATUS = f"{DECOMPILATIONS}/42/status"


def status(**fields):
    return httpx.Response(200, json={"id": "42", **fields})


@pytest.fixture
def started(api):
    return api.post(DECOMPILATIONS).mock(return_value=httpx.Response(200, json={"id": "42"}))


@pytest.fixture
def job(decompiler, sample, started):
    return decompiler.start(DecompilationArguments(input_file=sample))


def finish(api, decompiler, job):
    api.get(STATUS).mock(return_value=status(finished=True, completion=100))
    decompiler.wait_until_finished(job)


class TestStart:
    def test_returns_handle_with_server_id(self, decompiler, job, config):
        assert job.id == "42"
        assert job.kind is JobKind.DECOMPILATION
        assert job.config == config
        assert job.status is None
        assert job.artifacts == {ArtifactKind.HLL, ArtifactKind.DSM, ArtifactKind.BINARY}

    def test_uploads_input_and_parameters(self, decompiler, sample, started):
        decompiler.start(DecompilationArguments(input_file=sample, target_language="py", generate_cg=True))

        body = started.calls.last.request.read()
        assert b'name="input"; filename="a.exe"' in body
        assert b'name="mode"' in body
        assert b'name="target_language"' in body
        assert sample.content in body

    def test_without_input_file_sends_nothing(self, api, decompiler, started):
        with pytest.raises(InvalidArgumentsError):
            decompiler.start(DecompilationArguments(mode="bin"))

        assert not started.called
        assert api.calls.call_count == 0

    def test_reply_without_id(self, api, decompiler, sample):
        api.post(DECOMPILATIONS).mock(return_value=httpx.Response(200, json={}))

        with pytest.raises(MalformedResponseError):
            decompiler.start(DecompilationArguments(input_file=sample))

    def test_rejected_submission(self, api, decompiler, sample):
        api.post(DECOMPILATIONS).mock(
            return_value=httpx.Response(400, json={"code": 400, "message": "Input file is too large."})
        )

        with pytest.raises(RetdecAPIError, match="Input file is too large."):
            decompiler.start(DecompilationArguments(input_file=sample))


class TestStatus:
    def test_single_poll(self, api, decompiler, job):
        route = api.get(STATUS).mock(return_value=status(finished=False, completion=20))

        result = decompiler.get_status(job)

        assert result.state is JobState.RUNNING
        assert result.completion == 20
        assert job.status == result
        assert route.call_count == 1

    def test_terminal_status_is_not_polled_again(self, api, decompiler, job):
        route = api.get(STATUS).mock(return_value=status(finished=True))

        first = decompiler.get_status(job)
        second = decompiler.get_status(job)

        assert first.finished
        assert second == first
        assert route.call_count == 1

    def test_regressed_state_is_reported_as_is(self, api, decompiler, job):
        api.get(STATUS).mock(side_effect=[status(running=True, finished=False), status(finished=False)])

        assert decompiler.get_status(job).state is JobState.RUNNING
        assert decompiler.get_status(job).state is JobState.QUEUED

    def test_status_of_another_job(self, api, decompiler, job):
        api.get(STATUS).mock(return_value=httpx.Response(200, json={"id": "43", "finished": False}))

        with pytest.raises(MalformedResponseError):
            decompiler.get_status(job)

    def test_handle_of_another_service(self, decompiler, config):
        handle = JobHandle(id="42", kind=JobKind.ANALYSIS, config=config)

        with pytest.raises(InvalidArgumentsError):
            decompiler.get_status(handle)


class TestWaitUntilFinished:
    def test_polls_until_finished(self, api, decompiler, job, sleeps):
        route = api.get(STATUS).mock(
            side_effect=[
                status(finished=False),
                status(finished=False, completion=50),
                status(finished=True, completion=100),
            ]
        )
        seen = []

        decompiler.wait_until_finished(job, poll_interval=3.0, on_status=seen.append)

        assert route.call_count == 3
        assert sleeps == [3.0, 3.0]
        assert [s.state for s in seen] == [JobState.QUEUED, JobState.RUNNING, JobState.FINISHED]
        assert job.status.finished

    def test_uses_default_interval(self, api, decompiler, job, sleeps):
        api.get(STATUS).mock(side_effect=[status(finished=False), status(finished=True)])

        decompiler.wait_until_finished(job)

        assert sleeps == [0.5]

    def test_failed_job(self, api, decompiler, job, sleeps):
        api.get(STATUS).mock(return_value=status(finished=True, failed=True, error="Unsupported input."))

        with pytest.raises(JobFailedError, match="Unsupported input.") as exc_info:
            decompiler.wait_until_finished(job)

        assert exc_info.value.job_id == "42"
        assert sleeps == []

    def test_returns_immediately_when_already_finished(self, api, decompiler, job, sleeps):
        finish(api, decompiler, job)
        calls = api.calls.call_count

        decompiler.wait_until_finished(job)

        assert api.calls.call_count == calls


class TestOutputs:
    def test_output_before_finish_is_not_ready(self, api, decompiler, job):
        route = api.get(f"{DECOMPILATIONS}/42/outputs/hll").mock(return_value=httpx.Response(200, text="int main();"))

        with pytest.raises(NotReadyError):
            decompiler.get_output(job, ArtifactKind.HLL)

        api.get(STATUS).mock(return_value=status(finished=False))
        decompiler.get_status(job)
        with pytest.raises(NotReadyError):
            decompiler.get_output(job, "hll")

        assert not route.called

    def test_output_of_failed_job_is_not_ready(self, api, decompiler, job):
        api.get(STATUS).mock(return_value=status(finished=True, failed=True))
        decompiler.get_status(job)

        with pytest.raises(NotReadyError):
            decompiler.get_output(job, ArtifactKind.HLL)

    def test_hll_code(self, api, decompiler, job):
        finish(api, decompiler, job)
        route = api.get(f"{DECOMPILATIONS}/42/outputs/hll").mock(
            return_value=httpx.Response(200, text="int main() { return 0; }")
        )

        assert decompiler.get_output_hll_code(job) == "int main() { return 0; }"
        assert decompiler.get_output(job, "hll") == b"int main() { return 0; }"
        assert route.call_count == 2

    def test_dsm_code(self, api, decompiler, job):
        finish(api, decompiler, job)
        api.get(f"{DECOMPILATIONS}/42/outputs/dsm").mock(return_value=httpx.Response(200, text="; main"))

        assert decompiler.get_output_dsm_code(job) == "; main"

    def test_code_that_is_not_utf8(self, api, decompiler, job):
        finish(api, decompiler, job)
        api.get(f"{DECOMPILATIONS}/42/outputs/hll").mock(return_value=httpx.Response(200, content=b"\xc3\x28"))

        with pytest.raises(MalformedResponseError):
            decompiler.get_output_hll_code(job)

    def test_call_graph_requires_generation(self, api, decompiler, job):
        finish(api, decompiler, job)

        with pytest.raises(UnsupportedArtifactError):
            decompiler.get_output(job, ArtifactKind.CG)

    def test_call_graph(self, api, decompiler, sample, started):
        job = decompiler.start(DecompilationArguments(input_file=sample, generate_cg=True))
        finish(api, decompiler, job)
        api.get(f"{DECOMPILATIONS}/42/outputs/cg").mock(return_value=httpx.Response(200, content=b"<svg/>"))

        assert decompiler.get_output(job, ArtifactKind.CG) == b"<svg/>"

    @pytest.mark.parametrize("kind", ["report", "pdf"])
    def test_unknown_artifact(self, api, decompiler, job, kind):
        finish(api, decompiler, job)

        with pytest.raises(UnsupportedArtifactError):
            decompiler.get_output(job, kind)

    def test_save_output(self, api, decompiler, job, tmp_path):
        finish(api, decompiler, job)
        api.get(f"{DECOMPILATIONS}/42/outputs/binary").mock(return_value=httpx.Response(200, content=b"\x7fELF"))

        path = decompiler.save_output(job, ArtifactKind.BINARY, tmp_path, "a.out")

        assert path == tmp_path / "a.out"
        assert path.read_bytes() == b"\x7fELF"
