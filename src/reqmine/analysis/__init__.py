"""Extraction and evidence-fusion subpackage for reqmine."""

from .comment_miner import CommentMiner
from .confidence_scorer import ConfidenceScorer, FindingBundle, group_findings
from .pattern_detector import PatternDetector, apply_consistency_boost
from .test_inference import TestInferrer

__all__ = [
    "CommentMiner",
    "ConfidenceScorer",
    "FindingBundle",
    "PatternDetector",
    "TestInferrer",
    "apply_consistency_boost",
    "group_findings",
]
