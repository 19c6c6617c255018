#!/usr/bin/env python3
"""
ClawSentry Core Scanning — Skill Scanner
==========================================
Static scan of installed skill directories:
- Recursive walk of each skill, files over the size cap skipped
- File content run through the shared file-content rules
- Snapshot of the most recent scan kept for later queries

A skill is an immediate subdirectory of one of the search roots. When
two roots hold a skill of the same name, the later root wins in
scan_all() and the earlier root wins in scan_one().

Import from: clawsentry.core.scanning.skill_scanner
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from clawsentry.core.analysis.findings import FindingExtractor
from clawsentry.core.constants import SCAN_MAX_FILE_BYTES
from clawsentry.core.types import FileFindings

logger = logging.getLogger("clawsentry.core.scanning.skill_scanner")

ScanResults = Dict[str, List[FileFindings]]


def results_to_dict(results: ScanResults) -> Dict[str, list]:
    """JSON-ready form of a scan result mapping."""
    return {name: [f.to_dict() for f in files] for name, files in results.items()}


class SkillScanner:
    """Scans skill directories for dangerous content."""

    def __init__(self, extractor: FindingExtractor = None,
                 search_roots: Iterable[Path] = (),
                 max_file_bytes: int = SCAN_MAX_FILE_BYTES):
        self.extractor = extractor or FindingExtractor()
        self.search_roots = [Path(r) for r in search_roots]
        self.max_file_bytes = max_file_bytes
        self._last_scan: ScanResults = {}
        self._lock = threading.Lock()

    @property
    def last_scan(self) -> ScanResults:
        with self._lock:
            return dict(self._last_scan)

    def _set_snapshot(self, results: ScanResults) -> None:
        with self._lock:
            self._last_scan = results

    def _scan_file(self, path: Path) -> Optional[FileFindings]:
        try:
            if path.stat().st_size > self.max_file_bytes:
                return None
            text = path.read_bytes().decode('utf-8', errors='replace')
        except OSError as e:
            logger.warning("Skill scan could not read %s: %s", path, e)
            return None
        findings = self.extractor.scan_text(text)
        if not findings:
            return None
        return FileFindings(file=str(path), findings=tuple(findings))

    def scan_directory(self, directory: Path) -> List[FileFindings]:
        directory = Path(directory)
        if not directory.is_dir():
            return []

        report: List[FileFindings] = []
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for name in sorted(files):
                path = Path(root) / name
                if not path.is_file():
                    continue
                result = self._scan_file(path)
                if result is not None:
                    report.append(result)
        return report

    def iter_skills(self) -> Iterable[Tuple[str, Path]]:
        for base in self.search_roots:
            if not base.is_dir():
                continue
            try:
                children = sorted(base.iterdir())
            except OSError as e:
                logger.warning("Skill scan could not list %s: %s", base, e)
                continue
            for child in children:
                if child.is_dir():
                    yield child.name, child

    def scan_all(self) -> ScanResults:
        results: ScanResults = {}
        for name, path in self.iter_skills():
            results[name] = self.scan_directory(path)
        self._set_snapshot(results)
        return results

    @staticmethod
    def _valid_name(name: str) -> bool:
        if not name or name in ('.', '..') or '..' in name:
            return False
        return '/' not in name and '\\' not in name and os.sep not in name

    def find_skill(self, name: str) -> Optional[Path]:
        if not self._valid_name(name):
            return None
        for base in self.search_roots:
            candidate = base / name
            if candidate.is_dir():
                return candidate
        return None

    def scan_one(self, name: str) -> Tuple[Optional[Path], List[FileFindings]]:
        """Scan a single skill by name. Unknown or unsafe names yield no results."""
        path = self.find_skill(name)
        results = self.scan_directory(path) if path is not None else []
        self._set_snapshot({name: results})
        return path, results


__all__ = ['SkillScanner', 'ScanResults', 'results_to_dict']
