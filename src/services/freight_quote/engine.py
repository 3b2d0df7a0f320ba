"""
Freight quote engine.

Drives the freight site's quote wizard in a private headless browser:
1. Session - load credentials or exported cookies
2. Wizard - run the stage handlers in fixed order (login, origin, destination,
   cargo, goods, submit, await results, filter, extract)
3. Outcome - carrier quotes and a durable results URL, or a tagged failure

Stages run strictly one after another on a single page. Recoverable stage
failures are logged and the pipeline moves on; fatal ones abort the run. The
browser is released on every exit path.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from common.config import Config, config
from common.errors import ErrorKind, FreightQuoteError, classify_automation_error, log_stage_errors
from common.logging import get_logger
from models.freight import EngineState, QuoteOutcome, QuoteRequest, StageReport, StageStatus
from services.freight_quote.browser import BrowserFactory, BrowserSession
from services.freight_quote.diagnostics import ScreenshotRecorder
from services.freight_quote.schemas import SessionCredentials, StageResult
from services.freight_quote.session import SessionProvider
from services.freight_quote.stages import PIPELINE, RunContext, Stage

logger = get_logger(__name__)


@dataclass
class QuoteRun:
    """Bookkeeping for one run: the engine states visited and how each stage ended."""

    run_id: str
    states: list[EngineState] = field(default_factory=lambda: [EngineState.IDLE])
    reports: list[StageReport] = field(default_factory=list)
    log: Any = field(init=False, repr=False)

    def __post_init__(self):
        self.log = logger.bind(run_id=self.run_id)

    @property
    def finished(self) -> bool:
        return self.state in (EngineState.DONE, EngineState.ABORTED)

    @property
    def state(self) -> EngineState:
        return self.states[-1]

    def enter(self, state: EngineState) -> None:
        if self.finished:
            raise RuntimeError(f"Run {self.run_id} already finished in {self.state.value}")
        self.states.append(state)

    def failure(self, kind: ErrorKind, message: str) -> QuoteOutcome:
        self.enter(EngineState.ABORTED)
        return QuoteOutcome.failure(kind, message, states=self.states, stage_reports=self.reports)


class FreightQuoteEngine:
    """
    Obtains live freight quotes by automating the freight site's quote wizard.

    Example:
        engine = FreightQuoteEngine()
        outcome = await engine.get_quote(request)
    """

    def __init__(
        self,
        settings: Config | None = None,
        session_provider: SessionProvider | None = None,
        browser_factory: BrowserFactory | None = None,
        stages: list[type[Stage]] | None = None,
    ):
        self.settings = settings or config
        self.session_provider = session_provider or SessionProvider(self.settings)
        self.browser_factory = browser_factory or BrowserFactory(self.settings)
        self.stage_types = stages or PIPELINE

    def build_stages(self) -> list[Stage]:
        return [stage_type(self.settings) for stage_type in self.stage_types]

    async def get_quote(self, request: QuoteRequest) -> QuoteOutcome:
        """Run the whole wizard for one request. Never raises for automation failures."""
        run = QuoteRun(run_id=uuid.uuid4().hex[:8])
        log = run.log
        log.info(
            f"[{run.run_id}] Starting freight quote: {request.source_address.city} -> "
            f"{request.destination_address.city}, {len(request.packages)} package(s)"
        )

        try:
            credentials = self.session_provider.obtain_session()
        except FreightQuoteError as e:
            log.error(f"[{run.run_id}] {e.kind.value}: {e}")
            return run.failure(e.kind, str(e))

        outcome: QuoteOutcome | None = None
        try:
            async with self.browser_factory.open() as session:
                outcome = await self._run_pipeline(run, session, request, credentials)
        except Exception as e:
            if outcome is not None:
                # Only browser teardown is left once the pipeline has returned
                log.warning(
                    f"[{run.run_id}] Browser teardown failed after run finished in {run.state.value}: "
                    f"{type(e).__name__}: {e}"
                )
                return outcome

            kind = classify_automation_error(e)
            if isinstance(e, FreightQuoteError):
                log.error(f"[{run.run_id}] {kind.value}: {e}")
                return run.failure(kind, str(e))
            if kind == ErrorKind.STAGE_TIMEOUT:
                # A timeout outside any stage is a navigation that never finished
                kind = ErrorKind.NAVIGATION_FAILURE
            log.exception(f"[{run.run_id}] Freight quote aborted in {run.state.value}: {type(e).__name__}: {e}")
            return run.failure(kind, f"{type(e).__name__}: {e}")

        return outcome

    async def _run_pipeline(
        self,
        run: QuoteRun,
        session: BrowserSession,
        request: QuoteRequest,
        credentials: SessionCredentials,
    ) -> QuoteOutcome:
        page = session.page
        recorder = ScreenshotRecorder(self.settings.freight_screenshot_dir, run.run_id)
        ctx = RunContext(page=page, browser_context=session.context, request=request, credentials=credentials)

        await page.goto(self.settings.freight_base_url, wait_until="domcontentloaded")

        for stage in self.build_stages():
            run.enter(stage.state)

            if stage.checkpoint_before:
                await recorder.capture(page, stage.checkpoint_before)

            result, attempts = await self._run_stage(run, stage, ctx)
            run.reports.append(
                StageReport(state=stage.state, status=result.status, diagnostic=result.diagnostic, attempts=attempts)
            )

            if result.is_fatal:
                run.log.error(f"[{run.run_id}] {stage.name} failed fatally: {result.diagnostic}")
                return run.failure(result.error_kind or ErrorKind.TRANSPORT_ERROR, result.diagnostic)

            if stage.checkpoint_after:
                await recorder.capture(page, stage.checkpoint_after)

        run.enter(EngineState.DONE)
        run.log.info(f"[{run.run_id}] Freight quote done: {len(ctx.carrier_quotes)} quote(s), url {ctx.quote_url}")
        return QuoteOutcome(
            success=True,
            quote_url=ctx.quote_url,
            carrier_quotes=ctx.carrier_quotes,
            states=run.states,
            stage_reports=run.reports,
        )

    async def _run_stage(self, run: QuoteRun, stage: Stage, ctx: RunContext) -> tuple[StageResult, int]:
        attempts = max(1, stage.max_attempts)
        result = StageResult.skipped()
        for attempt in range(1, attempts + 1):
            run.log.info(f"[{run.run_id}] Stage {stage.name} (attempt {attempt}/{attempts})")
            try:
                with log_stage_errors(stage.name):
                    result = await stage.run(ctx)
            except PlaywrightTimeoutError as e:
                result = StageResult.recoverable(f"Timed out: {e}")

            if result.status != StageStatus.FAILED_RECOVERABLE:
                run.log.info(f"[{run.run_id}] Stage {stage.name}: {result.status.value} {result.diagnostic}".rstrip())
                return result, attempt

            run.log.warning(f"[{run.run_id}] Stage {stage.name} degraded: {result.diagnostic}")

        return result, attempts
