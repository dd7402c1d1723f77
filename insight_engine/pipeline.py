"""
Insight Pipeline - Orchestrates one stateless report run.

Flow:
1. Normalize all payloads concurrently and merge (join barrier)
2. Analyze the merged dataset
3. Build the prompt
4. Call the model (external; optional client)
5. Reconcile the reply and assemble the report model
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from insight_engine.analyzer.client import ClaudeClient
from insight_engine.analyzer.engine import AnalysisResult, Analyzer
from insight_engine.analyzer.prompt import PromptBundle, build_prompt
from insight_engine.collector.merger import MergedDataset
from insight_engine.collector.orchestrator import CollectionInput, SourceCollectionOrchestrator
from insight_engine.output.parser import InsightReconciler, ModelReply
from insight_engine.reporter.model import ReportModel, assemble_report
from insight_engine.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedRun:
    """Everything up to the model call."""
    dataset: MergedDataset
    analysis: AnalysisResult
    bundle: PromptBundle


class InsightPipeline:
    """
    Runs normalize -> merge -> analyze -> prompt -> reconcile -> assemble.

    The model call is the only step with I/O and can be skipped by passing
    an already-obtained reply to run().
    """

    def __init__(
        self,
        client: Optional[ClaudeClient] = None,
        settings: Optional[Settings] = None,
        brand_terms: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize pipeline.

        Args:
            client: Claude client; without one, run() needs a reply
            settings: Settings (defaults to environment settings)
            brand_terms: Brand names for intent labelling (defaults to settings)
            timeout: Per-normalizer bounded wait (defaults to settings)
        """
        self.settings = settings or get_settings()
        self.client = client
        self.analyzer = Analyzer(
            brand_terms=brand_terms if brand_terms is not None else self.settings.brand_terms
        )
        self.orchestrator = SourceCollectionOrchestrator(
            timeout=timeout if timeout is not None else self.settings.NORMALIZE_TIMEOUT
        )
        self.reconciler = InsightReconciler()

    async def prepare(self, inputs: CollectionInput, site_url: str = "") -> PreparedRun:
        """Normalize, merge, analyze and build the prompt."""
        dataset = await self.orchestrator.collect_all(inputs, site_url=site_url)
        analysis = self.analyzer.analyze(dataset)
        bundle = build_prompt(dataset, analysis)
        return PreparedRun(dataset=dataset, analysis=analysis, bundle=bundle)

    def complete(self, prepared: PreparedRun, reply: Optional[ModelReply]) -> ReportModel:
        """Reconcile the model reply and assemble the report model."""
        insight = self.reconciler.reconcile(reply, raw_data=prepared.bundle.raw_data)
        return assemble_report(prepared.dataset, insight, prepared.analysis)

    async def run(
        self,
        inputs: CollectionInput,
        site_url: str = "",
        reply: Optional[ModelReply] = None,
    ) -> ReportModel:
        """
        Run the full pipeline.

        Args:
            inputs: Raw payloads for this run
            site_url: Property being reported on
            reply: Model reply, if the caller already made the call

        Returns:
            ReportModel (possibly degraded, never raised)
        """
        logger.info(f"Starting insight run for {site_url or 'site'}")
        prepared = await self.prepare(inputs, site_url=site_url)

        if reply is None:
            if self.client is None:
                logger.warning("No model client configured and no reply supplied")
                reply = ModelReply(succeeded=False, error_message="No model client configured")
            else:
                reply = await self.client.complete_with_retry(
                    prepared.bundle,
                    max_tokens=self.settings.MAX_OUTPUT_TOKENS,
                    temperature=self.settings.TEMPERATURE,
                )

        report = self.complete(prepared, reply)
        logger.info(f"Insight run complete for {site_url or 'site'}")
        return report
