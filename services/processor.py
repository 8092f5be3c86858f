"""Decode, resolve and re-encode orchestration for SenML pack files."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from models.errors import SenMLError
from services.resolver import Resolver
from settings import get_settings
from wire.codec import PackFormat, decode, encode, infer_format, parse_format

logger = logging.getLogger(__name__)

FormatLike = Union[str, PackFormat]


class ProcessingStatus(str, Enum):
    """Outcome of processing one pack."""

    resolved = "resolved"
    converted = "converted"
    failed = "failed"


class ProcessingError(BaseModel):
    """Why a pack was rejected."""

    code: str
    reason: str
    record_index: Optional[int] = Field(default=None, ge=0)


class ProcessingResult(BaseModel):
    """Full record representing one processed pack."""

    source: str
    status: ProcessingStatus
    record_count: int = Field(default=0, ge=0)
    processing_ms: Optional[int] = Field(
        default=None, description="Duration in milliseconds from start to finish."
    )
    output: Optional[bytes] = None
    error: Optional[ProcessingError] = None


class PackProcessor:
    """Coordinates the codecs and the resolver for whole packs."""

    def __init__(
        self,
        resolver: Resolver,
        input_format: Optional[FormatLike] = None,
        output_format: FormatLike = PackFormat.json,
        json_indent: Optional[int] = None,
        workers: int = 4,
    ) -> None:
        self.resolver = resolver
        self.input_format = parse_format(input_format) if input_format else None
        self.output_format = parse_format(output_format)
        self.json_indent = json_indent
        self.workers = workers

    def process_bytes(
        self,
        payload: bytes,
        input_format: Optional[FormatLike] = None,
        output_format: Optional[FormatLike] = None,
        resolve: bool = True,
        source: str = "<bytes>",
    ) -> ProcessingResult:
        """Run one pack through decode, resolve and encode.

        Any ``SenMLError`` rejects the whole pack; the result then carries the
        error instead of output.
        """
        start_time = time.perf_counter()
        in_format = parse_format(input_format or self.input_format or PackFormat.json)
        out_format = parse_format(output_format or self.output_format)

        try:
            records = decode(payload, in_format)
            if resolve:
                records = self.resolver.resolve(records)
            output = encode(records, out_format, indent=self.json_indent)
        except SenMLError as exc:
            error = ProcessingError(
                code=exc.code,
                reason=str(exc),
                record_index=getattr(exc, "record_index", None),
            )
            logger.warning(
                "Rejected SenML pack",
                extra={
                    "source": source,
                    "pack_format": in_format.value,
                    "error_code": error.code,
                    "record_index": error.record_index,
                    "reason": error.reason,
                },
            )
            return ProcessingResult(
                source=source,
                status=ProcessingStatus.failed,
                processing_ms=int((time.perf_counter() - start_time) * 1000),
                error=error,
            )

        processing_ms = int((time.perf_counter() - start_time) * 1000)
        status = ProcessingStatus.resolved if resolve else ProcessingStatus.converted
        logger.info(
            "Processed SenML pack",
            extra={
                "source": source,
                "pack_format": in_format.value,
                "status": status.value,
                "record_count": len(records),
                "processing_ms": processing_ms,
            },
        )
        return ProcessingResult(
            source=source,
            status=status,
            record_count=len(records),
            processing_ms=processing_ms,
            output=output,
        )

    def process_file(
        self,
        path: Path,
        input_format: Optional[FormatLike] = None,
        output_format: Optional[FormatLike] = None,
        resolve: bool = True,
    ) -> ProcessingResult:
        """Read ``path`` and process it, inferring the format from its suffix."""
        try:
            in_format = (
                parse_format(input_format)
                if input_format
                else infer_format(path, default=self.input_format or PackFormat.json)
            )
        except SenMLError as exc:
            return ProcessingResult(
                source=str(path),
                status=ProcessingStatus.failed,
                error=ProcessingError(code=exc.code, reason=str(exc)),
            )
        try:
            payload = path.read_bytes()
        except OSError as exc:
            error = ProcessingError(code="read_error", reason=str(exc))
            logger.warning(
                "Could not read SenML pack",
                extra={"source": str(path), "error_code": error.code, "reason": error.reason},
            )
            return ProcessingResult(
                source=str(path),
                status=ProcessingStatus.failed,
                error=error,
            )
        return self.process_bytes(
            payload,
            input_format=in_format,
            output_format=output_format,
            resolve=resolve,
            source=str(path),
        )

    def process_files(
        self,
        paths: Iterable[Path],
        input_format: Optional[FormatLike] = None,
        output_format: Optional[FormatLike] = None,
        resolve: bool = True,
    ) -> List[ProcessingResult]:
        """Process independent packs concurrently, keeping the input order."""
        path_list = list(paths)
        if not path_list:
            return []
        with ThreadPoolExecutor(max_workers=min(self.workers, len(path_list))) as executor:
            results = list(
                executor.map(
                    lambda path: self.process_file(
                        path,
                        input_format=input_format,
                        output_format=output_format,
                        resolve=resolve,
                    ),
                    path_list,
                )
            )
        failed = sum(1 for result in results if result.status is ProcessingStatus.failed)
        logger.info(
            "Processed SenML batch",
            extra={"file_count": len(results), "reason": f"{failed} failed"},
        )
        return results


@lru_cache
def build_default_processor(
    workers: Optional[int] = None,
) -> PackProcessor:
    """Factory that wires the processor from environment settings."""
    settings = get_settings()
    worker_count = workers or settings.processor_workers
    return PackProcessor(
        resolver=Resolver(),
        input_format=settings.input_format,
        output_format=settings.output_format,
        json_indent=settings.json_indent,
        workers=worker_count,
    )
