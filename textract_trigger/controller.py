"""
Job Lifecycle Controller

Drives one asynchronous text detection job from submission to its
last result page:

1. Submit StartDocumentTextDetection for the S3 object
2. Poll GetDocumentTextDetection at a fixed interval until the job
   leaves IN_PROGRESS (bounded by an explicit wait budget)
3. On SUCCEEDED, page through the results and emit every block as
   it arrives
4. On FAILED, log the service status message and return normally

Only the FAILED outcome is absorbed. Every other error propagates.
"""

import hashlib
import time
from typing import Callable, Iterator

import structlog
from botocore.exceptions import ClientError
from tenacity import RetryError, Retrying, retry_if_result, wait_fixed
from tenacity.stop import stop_base

from textract_trigger.config import Settings, get_settings
from textract_trigger.emitter import emit_block
from textract_trigger.exceptions import (
    DetectionTimeoutError,
    JobStatusError,
    JobSubmissionError,
)
from textract_trigger.job_status import JobStatus
from textract_trigger.models import (
    DetectionJob,
    DetectionOutcome,
    ObjectMetadata,
    ObjectReference,
    ResultPage,
    TextBlock,
)
from textract_trigger.tools.textract import get_text_detection, start_text_detection

log = structlog.get_logger()


def build_request_token(metadata: ObjectMetadata) -> str | None:
    """
    Derive a ClientRequestToken from the object's identity and ETag.

    Textract returns the same JobId for a repeated token, so a redelivered
    notification for the same upload does not start a second job. A new
    upload to the same key has a new ETag and gets a new job.
    """
    if not metadata.etag:
        return None
    digest = hashlib.sha256(
        f"{metadata.bucket}/{metadata.key}/{metadata.etag}".encode("utf-8")
    )
    return digest.hexdigest()[:64]


class _stop_when_budget_spent(stop_base):
    """Stop before a sleep that would end past the wait budget."""

    def __init__(
        self,
        clock: Callable[[], float],
        started: float,
        max_wait: float,
        interval: float,
    ) -> None:
        self.clock = clock
        self.started = started
        self.max_wait = max_wait
        self.interval = interval

    def __call__(self, retry_state) -> bool:
        return self.clock() - self.started + self.interval > self.max_wait


class JobLifecycleController:
    """
    State machine for a single text detection job.

    One controller serves one invocation. It owns the DetectionJob and
    never shares it.

    Usage:
        with textract.open_client(settings) as client:
            controller = JobLifecycleController(client, settings)
            outcome = controller.run(ObjectReference(bucket="b", key="k"))
    """

    def __init__(
        self,
        textract_client,
        settings: Settings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = textract_client
        self._settings = settings or get_settings()
        self._sleep = sleep
        self._clock = clock
        self.polls = 0
        self.pages_fetched = 0

    @property
    def settings(self) -> Settings:
        return self._settings

    def submit(
        self,
        object_ref: ObjectReference,
        *,
        client_request_token: str | None = None,
    ) -> DetectionJob:
        """
        Start a text detection job for the object.

        Raises:
            JobSubmissionError: If Textract rejects the job (for example a
                bucket in another region or an unsupported document)
        """
        log.info(
            "starting_text_detection_job",
            bucket=object_ref.bucket,
            key=object_ref.key,
        )

        try:
            job_id = start_text_detection(
                self._client,
                object_ref,
                client_request_token=client_request_token,
                job_tag=self._settings.job_tag,
            )
        except ClientError as e:
            error = e.response.get("Error", {})
            log.error(
                "text_detection_start_failed",
                bucket=object_ref.bucket,
                key=object_ref.key,
                error_code=error.get("Code"),
                error=str(e),
            )
            raise JobSubmissionError(
                bucket=object_ref.bucket,
                key=object_ref.key,
                error_code=error.get("Code"),
                error_message=error.get("Message") or str(e),
            ) from e

        log.info("text_detection_job_started", job_id=job_id)

        return DetectionJob(job_id=job_id, object_ref=object_ref)

    def poll(self, job: DetectionJob) -> DetectionJob:
        """
        Query the job's current status once.

        Returns:
            The job with the observed status

        Raises:
            JobStatusError: If the status query fails
        """
        try:
            response = get_text_detection(self._client, job.job_id, max_results=1)
        except ClientError as e:
            error = e.response.get("Error", {})
            raise JobStatusError(
                job_id=job.job_id,
                operation="poll",
                error_code=error.get("Code"),
                error_message=error.get("Message") or str(e),
            ) from e

        self.polls += 1
        status = JobStatus.from_service(response.get("JobStatus"))

        log.debug(
            "job_status_polled",
            job_id=job.job_id,
            status=status.value,
            attempt=self.polls,
        )

        return job.with_status(status, response.get("StatusMessage"))

    def wait_for_completion(
        self,
        job: DetectionJob,
        max_wait: float | None = None,
    ) -> DetectionJob:
        """
        Poll until the job leaves IN_PROGRESS.

        Each round is: status query, terminal check, fixed delay. The
        loop gives up before starting a delay that would overrun
        max_wait (settings.poll_max_wait_seconds when not given).

        Raises:
            DetectionTimeoutError: If the budget runs out first
            JobStatusError: If a status query fails
        """
        interval = self._settings.poll_interval_seconds
        budget = max_wait if max_wait is not None else self._settings.poll_max_wait_seconds
        started = self._clock()
        current = job

        def _poll_once() -> DetectionJob:
            nonlocal current
            current = self.poll(current)
            return current

        retrying = Retrying(
            retry=retry_if_result(lambda polled: not polled.is_terminal),
            wait=wait_fixed(interval),
            stop=_stop_when_budget_spent(self._clock, started, budget, interval),
            sleep=self._sleep,
        )

        log.info(
            "waiting_for_job",
            job_id=job.job_id,
            poll_interval_seconds=interval,
            max_wait_seconds=budget,
        )

        try:
            finished = retrying(_poll_once)
        except RetryError as e:
            waited = self._clock() - started
            log.error(
                "job_wait_timed_out",
                job_id=job.job_id,
                polls=self.polls,
                waited_seconds=round(waited, 3),
                max_wait_seconds=budget,
            )
            raise DetectionTimeoutError(
                job_id=job.job_id,
                waited_seconds=waited,
                max_wait_seconds=budget,
            ) from e

        log.info(
            "job_finished",
            job_id=finished.job_id,
            status=finished.status.value,
            polls=self.polls,
        )

        return finished

    def fetch_page(
        self,
        job: DetectionJob,
        next_token: str | None = None,
    ) -> ResultPage:
        """
        Fetch one page of results.

        Raises:
            JobStatusError: If the request fails
        """
        try:
            response = get_text_detection(
                self._client,
                job.job_id,
                next_token=next_token,
                max_results=self._settings.results_page_size,
            )
        except ClientError as e:
            error = e.response.get("Error", {})
            raise JobStatusError(
                job_id=job.job_id,
                operation="fetch_page",
                error_code=error.get("Code"),
                error_message=error.get("Message") or str(e),
            ) from e

        self.pages_fetched += 1
        page = ResultPage.from_response(response)

        log.info(
            "result_page_fetched",
            job_id=job.job_id,
            page=self.pages_fetched,
            blocks_in_page=len(page.blocks),
            has_more=page.has_more,
        )

        return page

    def drain_pages(self, job: DetectionJob) -> Iterator[TextBlock]:
        """
        Yield every block of a succeeded job, page by page.

        Blocks keep the order Textract returned them in. Stops after the
        first page without a (non-empty) NextToken.

        Raises:
            ValueError: If the job has not succeeded
        """
        if not job.succeeded:
            raise ValueError(
                f"Job '{job.job_id}' has status {job.status.value}; "
                "only succeeded jobs have results"
            )

        next_token = None
        while True:
            page = self.fetch_page(job, next_token)
            yield from page.blocks

            if not page.has_more:
                return
            next_token = page.next_token

    def run(
        self,
        object_ref: ObjectReference,
        *,
        emit: Callable[[TextBlock], None] = emit_block,
        max_wait: float | None = None,
        client_request_token: str | None = None,
    ) -> DetectionOutcome:
        """
        Submit, wait and stream the results of one job.

        A job that ends FAILED is logged with its status message and
        reported through the outcome; nothing is raised for it.

        Returns:
            DetectionOutcome summarizing the run
        """
        job = self.submit(object_ref, client_request_token=client_request_token)
        job = self.wait_for_completion(job, max_wait=max_wait)

        if not job.succeeded:
            log.error(
                "text_detection_job_failed",
                job_id=job.job_id,
                s3_uri=object_ref.s3_uri,
                status_message=job.status_message,
            )
            return DetectionOutcome(job=job, polls=self.polls)

        emitted = 0
        for block in self.drain_pages(job):
            emit(block)
            emitted += 1

        log.info(
            "text_detection_completed",
            job_id=job.job_id,
            pages=self.pages_fetched,
            blocks=emitted,
        )

        return DetectionOutcome(
            job=job,
            polls=self.polls,
            pages_fetched=self.pages_fetched,
            blocks_emitted=emitted,
        )
