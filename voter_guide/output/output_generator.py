"""
Output generation for voter guide results.

This module provides the OutputGenerator class for rendering a resolution
result as a console report or JSON document, and for writing timestamped
JSON and candidate CSV files.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from ..logging_config import VoterGuideLogger
from ..models import Candidate, Position, ResolutionResult, SearchOutcome


CANDIDATE_COLUMNS = ['group', 'name', 'position', 'ward', 'url']


class OutputGenerator:
    """
    Renders and writes resolution results.

    Files are named with the resolved ward and a timestamp taken when the
    generator is created.
    """

    def __init__(self, output_directory: Optional[str] = None,
                 logger: Optional[VoterGuideLogger] = None):
        """
        Initialize the OutputGenerator.

        Args:
            output_directory: Directory for written files (None = render only)
            logger: Optional logger instance for logging operations
        """
        self.output_directory = output_directory
        self.logger = logger or VoterGuideLogger()
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        if self.output_directory:
            Path(self.output_directory).mkdir(parents=True, exist_ok=True)

        self.file_patterns = {
            'json': 'ward_{ward}_result_{timestamp}.json',
            'candidates': 'ward_{ward}_candidates_{timestamp}.csv'
        }

    def format_text(self, outcome: SearchOutcome) -> str:
        """
        Render an outcome as a plain-text report.

        Args:
            outcome: Search outcome (resolved or failed)

        Returns:
            Report text
        """
        if not outcome.succeeded:
            return f"Error: {outcome.message}"

        result = outcome.result
        lines = [
            f"WARD {result.ward}",
            "=" * 40,
            result.source_description(),
            ""
        ]

        sections = [
            ("Mayor", result.mayors),
            (f"Councillor - Ward {result.ward}", result.councillors),
            ("School Board Trustee", result.trustees)
        ]
        for title, candidates in sections:
            lines.append(f"{title} candidates ({len(candidates)})")
            lines.append("-" * 30)
            if not candidates:
                lines.append("  (none listed)")
            for candidate in candidates:
                lines.append(self._format_candidate(candidate))
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    @staticmethod
    def _format_candidate(candidate: Candidate) -> str:
        line = f"  {candidate.name}"
        if candidate.office not in (Position.MAYOR, Position.COUNCILLOR):
            line += f" ({candidate.position})"
        if candidate.url:
            line += f" - {candidate.url}"
        return line

    def to_dict(self, outcome: SearchOutcome) -> Dict:
        """Convert an outcome to a JSON-serializable dictionary."""
        data = {
            'status': outcome.state.value,
            'message': outcome.message
        }
        if outcome.result is not None:
            data['result'] = outcome.result.to_dict()
            data['matched_by'] = outcome.result.source_description()
        return data

    def format_json(self, outcome: SearchOutcome) -> str:
        """Render an outcome as an indented JSON document."""
        return json.dumps(self.to_dict(outcome), indent=2, ensure_ascii=False)

    def candidates_frame(self, result: ResolutionResult) -> pd.DataFrame:
        """
        Tabulate the candidates of a result.

        Args:
            result: Resolved ward with its candidates

        Returns:
            DataFrame with one row per candidate, grouped mayor, councillor, trustee
        """
        rows = []
        for group, candidates in (('mayor', result.mayors),
                                  ('councillor', result.councillors),
                                  ('trustee', result.trustees)):
            for candidate in candidates:
                rows.append([group, candidate.name, candidate.position,
                             candidate.ward or '', candidate.url or ''])

        return pd.DataFrame(rows, columns=CANDIDATE_COLUMNS)

    def write_outputs(self, outcome: SearchOutcome) -> Dict[str, str]:
        """
        Write the JSON document and, for a resolved outcome, the candidate CSV.

        Returns:
            Dictionary mapping output type to generated file path

        Raises:
            ValueError: If the generator has no output directory
        """
        generated_files = {'json': self.write_json(outcome)}
        if outcome.succeeded:
            generated_files['candidates'] = self.write_candidates_csv(outcome.result)

        self.logger.info(f"Generated {len(generated_files)} output files")
        return generated_files

    def write_json(self, outcome: SearchOutcome) -> str:
        """Write an outcome as JSON and return the file path."""
        ward = outcome.result.ward if outcome.succeeded else 'none'
        file_path = self._output_path('json', ward)

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(self.format_json(outcome))

        self.logger.info(f"Generated result file: {file_path}")
        return file_path

    def write_candidates_csv(self, result: ResolutionResult) -> str:
        """Write the candidates of a result as CSV and return the file path."""
        file_path = self._output_path('candidates', result.ward)

        df = self.candidates_frame(result)
        df.to_csv(file_path, index=False, encoding='utf-8')

        self.logger.info(f"Generated candidates file: {file_path} ({len(df)} records)")
        return file_path

    def _output_path(self, file_type: str, ward: str) -> str:
        if not self.output_directory:
            raise ValueError("No output directory configured")

        filename = self.file_patterns[file_type].format(ward=ward, timestamp=self.timestamp)
        return os.path.join(self.output_directory, filename)

    def validate_output_directory(self) -> bool:
        """
        Validate that output directory is writable.

        Returns:
            True if directory is writable, False otherwise
        """
        if not self.output_directory:
            return False

        try:
            test_file = os.path.join(self.output_directory, f'test_write_{self.timestamp}.tmp')
            with open(test_file, 'w') as f:
                f.write('test')
            os.remove(test_file)
            return True
        except OSError as e:
            self.logger.error(f"Output directory not writable: {e}")
            return False

