"""
Document composition: the top-level generation pipeline.

A request moves through these states::

    INIT -> TEMPLATE_RESOLVED -> SECTIONS_RENDERED -> HEADERS_FOOTERS_APPLIED -> COMPLETED
                                                                        (any) -> FAILED

Sections render in ascending order. Each section whose condition passes is
rendered, followed immediately by its addendum pages. The parts are then
merged and decorated with headers and footers.
"""

from __future__ import annotations

import logging
from enum import Enum
from io import BytesIO
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from pypdf import PdfReader, PdfWriter

from ..config import GeneratorOptions
from ..exceptions import DocumentGenerationError, InvalidOverflowConfig
from ..loader.template_loader import TemplateLoader
from ..mapping.base import is_truthy
from ..mapping.registry import MappingStrategyRegistry
from ..models.template import DocumentGenerationRequest, OverflowConfig, PageSection, SectionType
from ..renderers.acroform import FormFillRenderer
from ..renderers.base import RenderedSection, SectionRendererRegistry
from ..renderers.component import ComponentRegistry, ComponentSectionRenderer
from ..renderers.header_footer import HeaderFooterProcessor
from ..renderers.templated_view import TemplatedViewRenderer
from .context import RenderContext
from .overflow import OverflowPlan, OverflowPlanner
from .viewmodels import ViewModelFactory

logger = logging.getLogger(__name__)


class GenerationState(Enum):
    INIT = "init"
    TEMPLATE_RESOLVED = "template_resolved"
    SECTIONS_RENDERED = "sections_rendered"
    HEADERS_FOOTERS_APPLIED = "headers_footers_applied"
    COMPLETED = "completed"
    FAILED = "failed"


def addendum_section_id(section_id: str, page_number: int) -> str:
    return f"{section_id}_addendum_{page_number}"


class DocumentComposer:
    """Generates a PDF from a template identifier and a data tree."""

    def __init__(
        self,
        loader: TemplateLoader,
        mappings: MappingStrategyRegistry,
        renderers: SectionRendererRegistry,
        header_footer: Optional[HeaderFooterProcessor] = None,
        planner: Optional[OverflowPlanner] = None,
    ) -> None:
        self.loader = loader
        self.mappings = mappings
        self.renderers = renderers
        self.header_footer = header_footer or HeaderFooterProcessor()
        self.planner = planner or OverflowPlanner()

    @classmethod
    def create_default(cls, options: Optional[GeneratorOptions] = None) -> "DocumentComposer":
        """Wire a composer with the built-in strategies and renderers."""
        options = options or GeneratorOptions()
        loader = TemplateLoader(options)
        mappings = MappingStrategyRegistry.create_default()
        view_models = ViewModelFactory()
        renderers = SectionRendererRegistry([
            FormFillRenderer(loader, mappings),
            TemplatedViewRenderer(loader, view_models, options),
            ComponentSectionRenderer(ComponentRegistry(), view_models, options),
        ])
        return cls(loader, mappings, renderers, HeaderFooterProcessor())

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def generate_request(self, request: DocumentGenerationRequest) -> bytes:
        return self.generate(request.template_id, request.data, request.variables)

    def generate(self, template_id: str, data: Mapping[str, Any],
                 variables: Optional[Mapping[str, Any]] = None) -> bytes:
        """
        Generate the PDF for ``template_id``.

        Args:
            template_id: Identifier resolved by the template loader
            data: Input data tree; never modified
            variables: Values for ``${...}`` placeholders in the template

        Returns:
            PDF bytes

        Raises:
            DocumentGenerationError: on any template or section failure,
                chained to the underlying error
        """
        logger.info("Generating document with template: %s", template_id)
        data = data if data is not None else {}
        state = GenerationState.INIT
        section_id: Optional[str] = None

        try:
            template = self.loader.load(template_id, variables)
            state = self._advance(state, GenerationState.TEMPLATE_RESOLVED)

            context = RenderContext(template, data, resource_reader=self.loader.get_resource_bytes)
            parts: List[RenderedSection] = []
            for section in template.sections:
                section_id = section.section_id
                if not self.should_render(section, context):
                    continue
                context.current_section_id = section_id
                parts.extend(self.render_section(section, context))
            section_id = None
            state = self._advance(state, GenerationState.SECTIONS_RENDERED)

            merged = self.merge_sections(parts)
            pdf_bytes = self.header_footer.apply(merged, template.header_footer_config, data)
            state = self._advance(state, GenerationState.HEADERS_FOOTERS_APPLIED)
        except Exception as exc:
            logger.error(
                "Document generation failed for template %s (section %s, state %s): %s",
                template_id, section_id, state.value, exc,
            )
            raise DocumentGenerationError(
                f"Failed to generate document from template '{template_id}'",
                template_id=template_id,
                section_id=section_id,
                details=str(exc),
            ) from exc

        self._advance(state, GenerationState.COMPLETED)
        logger.info("Document generation complete. Pages: %d, size: %d bytes", context.current_page, len(pdf_bytes))
        return pdf_bytes

    @staticmethod
    def _advance(current: GenerationState, new: GenerationState) -> GenerationState:
        logger.debug("Generation state %s -> %s", current.value, new.value)
        return new

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------
    def should_render(self, section: PageSection, context: RenderContext) -> bool:
        """Evaluate the section condition in the section's own mapping language."""
        if not section.condition:
            return True

        strategy = self.mappings.get(section.effective_mapping_type)
        try:
            result = strategy.evaluate_path(context.data, section.condition)
        except Exception as exc:
            logger.warning("Condition '%s' of section %s failed: %s", section.condition, section.section_id, exc)
            result = None

        if is_truthy(result):
            return True
        logger.info("Skipping section %s due to condition: %s", section.section_id, section.condition)
        return False

    def render_section(self, section: PageSection, context: RenderContext) -> List[RenderedSection]:
        """Render ``section`` and any addendum pages it overflows into, in page order."""
        renderer = self.renderers.get(section)
        logger.info("Rendering section: %s (type: %s)", section.section_id, section.section_type.value)

        data, plans = self.plan_overflow(section, context)
        main = renderer.render(section, context, data)
        context.advance_pages(main.page_count)
        parts = [main]

        for config, plan in plans:
            parts.extend(self.render_addenda(section, config, plan, context))
        return parts

    def plan_overflow(self, section: PageSection,
                      context: RenderContext) -> Tuple[Mapping[str, Any], List[Tuple[OverflowConfig, OverflowPlan]]]:
        """Plan every overflow config of ``section``.

        Returns the data tree for the main page (each overflowing array cut
        down to its main-page items) and the plans that produced addenda.
        """
        data = context.data
        plans: List[Tuple[OverflowConfig, OverflowPlan]] = []
        for config in section.overflow_configs:
            strategy = self.mappings.get(config.mapping_type)
            items = self._resolve_items(section, config, strategy, context.data)
            if items is None:
                continue

            plan = self.planner.plan(items, config, context, section.section_id)
            if not plan.has_overflow:
                continue
            if not config.addendum_template_path:
                raise InvalidOverflowConfig(
                    f"Section {section.section_id} overflows but has no addendumTemplatePath",
                    config.array_path,
                )
            data = strategy.assign_path(data, config.array_path, list(plan.main_page_items))
            plans.append((config, plan))
        return data, plans

    def _resolve_items(self, section: PageSection, config: OverflowConfig, strategy,
                       data: Mapping[str, Any]) -> Optional[Sequence[Any]]:
        try:
            collection = strategy.evaluate_path(data, config.array_path)
        except Exception as exc:
            logger.warning(
                "Overflow array path '%s' of section %s failed: %s", config.array_path, section.section_id, exc
            )
            return None
        if not isinstance(collection, (list, tuple)):
            logger.debug("Overflow array path '%s' did not evaluate to a list", config.array_path)
            return None
        return collection

    def render_addenda(self, section: PageSection, config: OverflowConfig, plan: OverflowPlan,
                       context: RenderContext) -> List[RenderedSection]:
        parts = []
        for index in range(plan.total_addendum_pages):
            addendum = PageSection(
                section_id=addendum_section_id(section.section_id, index + 1),
                section_type=SectionType.TEMPLATED_VIEW,
                template_path=config.addendum_template_path,
            )
            renderer = self.renderers.get(addendum)
            logger.info(
                "Rendering addendum page %d of %d for section %s with %d items",
                index + 1, plan.total_addendum_pages, section.section_id, len(plan.addendum_batches[index]),
            )
            rendered = renderer.render(addendum, context, plan.addendum_page_data(context.data, index))
            context.advance_pages(rendered.page_count)
            parts.append(rendered)
        return parts

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def merge_sections(self, parts: Sequence[RenderedSection]) -> bytes:
        """Concatenate the rendered parts in order."""
        if not parts:
            logger.warning("No sections were rendered; the document has no pages")
        if len(parts) == 1:
            return parts[0].pdf_bytes

        writer = PdfWriter()
        for part in parts:
            writer.append(PdfReader(BytesIO(part.pdf_bytes)))
        if any(part.field_values for part in parts):
            writer.set_need_appearances_writer(True)

        output = BytesIO()
        writer.write(output)
        return output.getvalue()
