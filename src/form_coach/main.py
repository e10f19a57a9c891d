import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .exercise_analysis import EXERCISE_ANALYZER_REGISTRY, get_exercise_analyzer
from .log_utils import get_logger, set_log_level
from .pose_detection import JsonLinesPoseSource
from .trainer import FormTrainer

logger = get_logger("FormCoach")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Exercise form coach - replay recorded landmark frames")
    parser.add_argument(
        "--exercise",
        type=str,
        default="squat",
        choices=sorted(EXERCISE_ANALYZER_REGISTRY),
        help="Type of exercise to analyze"
    )
    parser.add_argument(
        "--landmarks",
        type=str,
        required=True,
        help="JSON lines file with one landmark frame per line"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Threshold config JSON to use instead of the packaged defaults"
    )
    parser.add_argument(
        "--format",
        type=str,
        default="text",
        choices=["text", "json"],
        help="Output format, one line per frame"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


def format_result(result: Dict[str, Any], output_format: str) -> str:
    evaluation = result["evaluation"]
    if output_format == "json":
        record = {
            "frame": result["frame"],
            "phase": result["phase"],
            "evaluation": evaluation.to_dict(),
            "feedback": result["feedback"],
        }
        return json.dumps(record)
    status = "OK" if evaluation.is_correct else "; ".join(evaluation.issues)
    return f"{result['frame']:>5}  {result['phase']:<11} {status}"


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the form coach CLI."""
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)

    try:
        analyzer = get_exercise_analyzer(args.exercise, args.config)
        trainer = FormTrainer(analyzer=analyzer)
        for frame in JsonLinesPoseSource(args.landmarks):
            print(format_result(trainer.process_frame(frame), args.format))
    except (OSError, ValueError) as e:
        logger.error(f"Error running form coach: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
