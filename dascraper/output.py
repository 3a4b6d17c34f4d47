"""JSON output for extracted applications and debug row dumps."""

import json
from pathlib import Path
from typing import List, Optional
from dascraper.models import DevelopmentApplication, ExtractionSummary
from dascraper.rows import Row


class OutputGenerator:
    """Generates JSON output files."""

    def __init__(self, output_dir: str):
        """Initialize output generator.

        Args:
            output_dir: Output directory path
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate_records_json(
        self,
        name: str,
        applications: List[DevelopmentApplication],
        summary: Optional[ExtractionSummary] = None,
    ) -> Path:
        """Generate the records JSON file.

        Args:
            name: Base name for the file (usually the PDF stem)
            applications: Extracted applications
            summary: Optional extraction summary to include

        Returns:
            Path to generated JSON file
        """
        output_path = self.output_dir / f"{name}.records.json"

        data = {
            "summary": summary.model_dump(mode='json') if summary else None,
            "records": [application.model_dump(mode='json') for application in applications],
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        return output_path

    def generate_rows_json(self, name: str, rows: List[Row]) -> Path:
        """Generate a JSON dump of reconstructed rows for debugging."""
        output_path = self.output_dir / f"{name}.rows.json"

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)

        return output_path
