from verification.models import IssueCategory, LifecycleState, LabelScore, VerificationResult
from verification.labels import LabelSet, synthesize
from verification.cache import ResultCache
from verification.scoring import ScoreBreakdown, score, score_breakdown
from verification.lifecycle import ClassifierLifecycle
from verification.service import ImageVerificationService
