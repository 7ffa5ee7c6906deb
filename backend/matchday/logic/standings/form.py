from collections.abc import Sequence

from matchday.models.db.standings import FormCode

FORM_LENGTH = 5


def push_form_result(history: Sequence[FormCode], new_code: FormCode) -> list[FormCode]:
    """Most recent result first, the oldest one drops off once the window is full."""
    return [new_code, *history][:FORM_LENGTH]
