from __future__ import annotations

from typing import List

from pydantic import BaseModel

from tagref.model import Annotation, Diagnostic, ScanWarning, SourceLocation


class LocationDTO(BaseModel):
    path: str
    line: int
    column: int

    @classmethod
    def from_location(cls, location: SourceLocation) -> LocationDTO:
        return cls(path=location.display_path, line=location.line, column=location.column)


class AnnotationDTO(BaseModel):
    kind: str
    label: str
    location: LocationDTO

    @classmethod
    def from_annotation(cls, annotation: Annotation) -> AnnotationDTO:
        return cls(
            kind=annotation.kind.value,
            label=annotation.label,
            location=LocationDTO.from_location(annotation.location),
        )


class DiagnosticDTO(BaseModel):
    kind: str
    message: str
    locations: List[LocationDTO]

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> DiagnosticDTO:
        return cls(
            kind=diagnostic.kind.value,
            message=diagnostic.message,
            locations=[LocationDTO.from_location(item) for item in diagnostic.locations],
        )


class WarningDTO(BaseModel):
    path: str
    message: str

    @classmethod
    def from_warning(cls, warning: ScanWarning) -> WarningDTO:
        return cls(path=warning.path, message=warning.message)


class CheckResponseDTO(BaseModel):
    ok: bool
    files_scanned: int
    tags: int
    refs: int
    file_refs: int
    dir_refs: int
    diagnostics: List[DiagnosticDTO] = []
    warnings: List[WarningDTO] = []


class ListingResponseDTO(BaseModel):
    annotations: List[AnnotationDTO] = []
    warnings: List[WarningDTO] = []
