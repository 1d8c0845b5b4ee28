"""
PDF text extraction through an external converter process.

The converter contract is `<tool> <path>`: the tool reads the file at
`path` and writes the extracted text to stdout. Output on stderr and a
non-zero exit are reported by the converter and judged here.
"""

import asyncio
import logging
import os
import shlex
import tempfile
from typing import List, NamedTuple, Optional, Sequence, Union

from ..config import settings

logger = logging.getLogger(__name__)


class ConverterResult(NamedTuple):
    returncode: int
    stdout: bytes
    stderr: bytes


class TextConverter:
    """Interface for anything that turns a file on disk into text."""

    async def convert(self, path: str) -> ConverterResult:
        raise NotImplementedError


class SubprocessConverter(TextConverter):
    """
    Runs the converter as a child process.

    If the awaiting task is cancelled (e.g. by a deadline), the child is
    killed and reaped before the cancellation propagates.
    """

    def __init__(self, command: Union[str, Sequence[str]] = settings.ENRICHER_PDF_COMMAND):
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)

    async def convert(self, path: str) -> ConverterResult:
        logger.info(f"[pdf_extractor] Executing: {' '.join(self.command)} {path}")
        process = await asyncio.create_subprocess_exec(
            *self.command,
            path,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
            raise

        return ConverterResult(process.returncode, stdout, stderr)


class PdfTextExtractor:
    """
    Extracts text from PDF bytes with a deadline and guaranteed temp-file cleanup.
    """

    def __init__(
        self,
        converter: Optional[TextConverter] = None,
        timeout_sec: float = settings.ENRICHER_PDF_TIMEOUT_SEC,
        tmp_dir: Optional[str] = settings.ENRICHER_TMP_DIR,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize PdfTextExtractor.

        Args:
            converter: Converter to run, defaults to SubprocessConverter()
            timeout_sec: Deadline for one conversion
            tmp_dir: Directory for the temporary input file
            log: Diagnostic sink, defaults to the module logger
        """
        self.converter = converter or SubprocessConverter()
        self.timeout_sec = timeout_sec
        self.tmp_dir = tmp_dir
        self.logger = log or logger

    async def extract(self, body: bytes, url: str = '') -> Optional[str]:
        """
        Convert PDF bytes to plain text.

        Args:
            body: Raw PDF bytes
            url: Source URL (for diagnostics)

        Returns:
            Stripped stdout of the converter, or None on any failure
        """
        try:
            return await self._extract(body, url)
        except Exception as e:
            self.logger.error(f"[pdf_extractor] Error extracting text from PDF {url}: {e}")
            return None

    async def _extract(self, body: bytes, url: str) -> Optional[str]:
        fd, path = tempfile.mkstemp(prefix='searxng_', suffix='.pdf', dir=self.tmp_dir)
        os.close(fd)
        removed = False
        try:
            try:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, self._write_temp_file, path, body)
            except OSError as e:
                self.logger.error(f"[pdf_extractor] Could not write temp file for {url}: {e}")
                return None

            result = await asyncio.wait_for(self.converter.convert(path), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            self.logger.error(
                f"[pdf_extractor] PDF extraction timed out after {self.timeout_sec} seconds for {url}"
            )
            return None
        except OSError as e:
            self.logger.error(f"[pdf_extractor] Could not launch converter for {url}: {e}")
            return None
        finally:
            removed = self._remove_temp_file(path)

        if not removed:
            return None

        if result.stderr:
            stderr = result.stderr.decode('utf-8', errors='replace').strip()
            self.logger.warning(f"[pdf_extractor] Converter stderr for {url}: {stderr[:500]}")

        if result.returncode != 0:
            self.logger.error(f"[pdf_extractor] Converter exited with code {result.returncode} for {url}")
            return None

        text = result.stdout.decode('utf-8', errors='replace').strip()
        if not text:
            self.logger.warning(f"[pdf_extractor] Converter produced no text for {url}")
            return None

        return text

    @staticmethod
    def _write_temp_file(path: str, body: bytes) -> None:
        with open(path, 'wb') as f:
            f.write(body)

    def _remove_temp_file(self, path: str) -> bool:
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            self.logger.error(f"[pdf_extractor] Failed to remove temp file {path}: {e}")
            return False
