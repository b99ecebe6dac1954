"""
Report generators for scan results
"""

import csv
import io
import json
from datetime import datetime
from typing import Optional

from .models import ScanResult


class BaseReporter:
    """Base class for reporters"""

    def report(self, result: ScanResult, output: Optional[str] = None) -> str:
        """Generate report and optionally write to file"""
        raise NotImplementedError

    def _write_output(self, content: str, output: Optional[str]) -> None:
        """Write content to file or stdout"""
        if output:
            with open(output, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
        else:
            print(content)


class JSONReporter(BaseReporter):
    """JSON format reporter"""

    def report(self, result: ScanResult, output: Optional[str] = None) -> str:
        report_data = {
            'scan_info': {
                'target': result.target_path,
                'timestamp': datetime.now().isoformat(),
                'files_scanned': result.files_scanned,
                'duration_seconds': result.scan_duration_seconds,
            },
            'summary': result.summary,
            'total_modules': len(result.records),
            'modules': [r.to_dict() for r in result.records],
            'errors': result.errors,
        }

        content = json.dumps(report_data, indent=2)
        self._write_output(content, output)
        return content


class CSVReporter(BaseReporter):
    """CSV format reporter; list fields are joined with '|'"""

    COLUMNS = [
        'libName', 'apkName', 'jarName', 'apexName', 'version', 'headers',
        'libs', 'gcc_options', 'certificate', 'dexPreOpt', 'optimizeEnabled',
        'optimizeShrink', 'kind', 'sourceFile',
    ]

    LIST_SEPARATOR = '|'

    def report(self, result: ScanResult, output: Optional[str] = None) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=self.COLUMNS, extrasaction='ignore')
        writer.writeheader()

        for record in result.records:
            row = record.to_dict()
            for key, value in row.items():
                if isinstance(value, list):
                    row[key] = self.LIST_SEPARATOR.join(value)
            writer.writerow(row)

        content = buffer.getvalue()
        self._write_output(content, output)
        return content


def get_reporter(format: str, **kwargs) -> BaseReporter:
    """Factory function to get reporter by format"""
    reporters = {
        'json': JSONReporter,
        'csv': CSVReporter,
    }

    reporter_class = reporters.get(format.lower())
    if not reporter_class:
        raise ValueError(f"Unknown report format: {format}. Supported: {list(reporters.keys())}")

    return reporter_class(**kwargs)
