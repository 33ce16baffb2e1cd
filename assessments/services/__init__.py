from .attempts import (
    close_overdue_attempts,
    get_attempt,
    record_answer,
    refresh_attempt,
    start_or_resume,
    submit,
)
from .grading import (
    compute_score,
    grade_essay,
    is_choice_correct,
    max_score,
    percentage,
)
from .review import cancel_attempt, flag_attempt
from .violations import count_violations, log_violation
