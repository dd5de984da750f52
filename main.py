"""
Main entry point for the certificate ingestion pipeline
Example usage
"""

import json
from pathlib import Path

from certificate_ai import DocumentPipeline, setup_logging
from config import Config


def main():
    """Analyze one certificate from disk and save the result"""
    setup_logging(Config.LOG_LEVEL)
    if not Config.validate():
        print("Google Cloud is not configured; set GOOGLE_CREDENTIALS or GOOGLE_CLOUD_PROJECT")
        return

    pipeline = DocumentPipeline.from_config(Config)

    file_path = input("Enter path to certificate: ").strip()
    if not Path(file_path).exists():
        print(f"File not found: {file_path}")
        return

    print(f"\nProcessing: {file_path}")
    print("-" * 50)

    result = pipeline.process_file(file_path)
    response = result.to_response()

    if not result.success:
        print(f"\nFailed: {result.error}")
        print(f"Hint: {result.hint}")
        if result.details:
            print(f"Details: {result.details}")
        return

    analysis = result.analysis
    print(f"\nDetected Type: {analysis.detected_type} (confidence {analysis.type_confidence:.2f})")
    print(f"Reason: {analysis.reason}")
    if analysis.is_recognized:
        print(f"Target Table: {analysis.table_name} (section {analysis.section_code})")
        print("\nExtracted Fields:")
        for name, value in analysis.extracted.items():
            score = analysis.field_confidence.get(name)
            suffix = f"  [{score:.2f}]" if score is not None else ""
            print(f"  - {name}: {value if value is not None else '-'}{suffix}")
        if analysis.missing_required:
            print(f"\nMissing Required: {', '.join(analysis.missing_required)}")
    else:
        print(f"\n{result.warning}")

    output_file = Path(file_path).stem + "_analysis.json"
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(response, f, indent=2, ensure_ascii=False)

    print(f"\nResults saved to: {output_file}")


if __name__ == "__main__":
    main()
