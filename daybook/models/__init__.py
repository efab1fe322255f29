from .family import Family
from .student import Student
from .subject import Subject
from .metric import Metric, MetricType
from .student_subject import StudentSubject
from .student_metric import StudentMetric
from .student_subject_metric import StudentSubjectMetric
from .daily_log import DailyLog, DailyLogMetricValue

__all__ = [
    "Family",
    "Student",
    "Subject",
    "Metric",
    "MetricType",
    "StudentSubject",
    "StudentMetric",
    "StudentSubjectMetric",
    "DailyLog",
    "DailyLogMetricValue",
]
