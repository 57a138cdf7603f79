"""FastAPI application exposing the read-only corpus query interface."""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from ..corpus import BuildResult, Corpus
from ..models import CrossReference, DocEntity, ParamSpec
from ..parsing.references import resolve_references


class ParamModel(BaseModel):
    name: str
    type_hint: Optional[str] = None
    optional: bool = False
    description: str = ""
    default: Optional[str] = None
    parameters: Optional[List["ParamModel"]] = None


class ReferenceModel(BaseModel):
    source: str
    target: str
    label: str
    external: bool = False
    dangling: bool = False


class EntityModel(BaseModel):
    fqn: str
    name: str
    kind: str
    parent: Optional[str] = None
    section: Optional[str] = None
    superclass: Optional[str] = None
    summary: str = ""
    parameters: List[ParamModel] = []
    returns: Optional[str] = None
    examples: List[str] = []
    members: List[str] = []
    references: List[ReferenceModel] = []


class ChildrenResponse(BaseModel):
    fqn: str
    children: List[EntityModel]


class WarningModel(BaseModel):
    kind: str
    message: str
    path: Optional[str] = None
    line: Optional[int] = None
    subject: Optional[str] = None


class ReportResponse(BaseModel):
    files: List[str]
    entity_count: int
    summary: Dict[str, int]
    warnings: List[WarningModel]


class HealthResponse(BaseModel):
    status: str
    entities: int


def create_app(result: BuildResult) -> FastAPI:
    """Create the FastAPI application serving ``result`` read-only."""

    app = FastAPI(title="DocCorpus Service", version="1.0.0")

    async def get_corpus() -> Corpus:
        return result.corpus

    @app.get("/health", response_model=HealthResponse)
    async def health(corpus: Corpus = Depends(get_corpus)) -> HealthResponse:
        return HealthResponse(status="ok", entities=len(corpus))

    @app.get("/entities/{fqn}", response_model=EntityModel)
    async def lookup(fqn: str, corpus: Corpus = Depends(get_corpus)) -> EntityModel:
        entity = corpus.lookup(fqn)
        if entity is None:
            raise HTTPException(status_code=404, detail=f"No entity named {fqn!r}")
        return _entity_model(entity, corpus)

    @app.get("/entities/{fqn}/children", response_model=ChildrenResponse)
    async def children(fqn: str, corpus: Corpus = Depends(get_corpus)) -> ChildrenResponse:
        if fqn not in corpus:
            raise HTTPException(status_code=404, detail=f"No entity named {fqn!r}")
        return ChildrenResponse(
            fqn=fqn,
            children=[_entity_model(child, corpus) for child in corpus.children(fqn)],
        )

    @app.get("/references/dangling", response_model=List[ReferenceModel])
    async def dangling(corpus: Corpus = Depends(get_corpus)) -> List[ReferenceModel]:
        return [_reference_model(reference) for reference in corpus.dangling_references()]

    @app.get("/report", response_model=ReportResponse)
    async def report() -> ReportResponse:
        build_report = result.report
        return ReportResponse(
            files=list(build_report.files),
            entity_count=build_report.entity_count,
            summary=build_report.summary(),
            warnings=[
                WarningModel(
                    kind=warning.kind.value,
                    message=warning.message,
                    path=warning.path,
                    line=warning.line,
                    subject=warning.subject,
                )
                for warning in build_report.warnings
            ],
        )

    return app


def run_service(
    result: BuildResult, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app(result)
    uvicorn.run(app, host=host, port=port)


def _entity_model(entity: DocEntity, corpus: Corpus) -> EntityModel:
    return EntityModel(
        fqn=entity.fqn,
        name=entity.name,
        kind=entity.kind.value,
        parent=entity.parent,
        section=entity.section,
        superclass=entity.superclass,
        summary=entity.summary,
        parameters=[_param_model(param) for param in entity.parameters],
        returns=entity.returns,
        examples=list(entity.examples),
        members=[member.fqn for member in entity.members],
        references=[
            _reference_model(reference)
            for reference in resolve_references(entity.references, corpus)
        ],
    )


def _param_model(param: ParamSpec) -> ParamModel:
    return ParamModel(
        name=param.name,
        type_hint=param.type_hint,
        optional=param.optional,
        description=param.description,
        default=param.default,
        parameters=(
            [_param_model(nested) for nested in param.parameters]
            if param.parameters is not None
            else None
        ),
    )


def _reference_model(reference: CrossReference) -> ReferenceModel:
    return ReferenceModel(
        source=reference.source,
        target=reference.target,
        label=reference.label,
        external=reference.external,
        dangling=reference.dangling,
    )


__all__ = ["create_app", "run_service"]
