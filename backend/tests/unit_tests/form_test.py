from matchday.logic.standings.form import FORM_LENGTH, push_form_result
from matchday.models.db.standings import FormCode


def test_push_form_result_prepends_newest_result() -> None:
    form = push_form_result([FormCode.LOSS], FormCode.WIN)

    assert form == [FormCode.WIN, FormCode.LOSS]


def test_push_form_result_caps_history() -> None:
    form: list[FormCode] = []
    pushed = [
        FormCode.WIN,
        FormCode.DRAW,
        FormCode.LOSS,
        FormCode.WIN,
        FormCode.WIN,
        FormCode.DRAW,
        FormCode.LOSS,
    ]
    for code in pushed:
        form = push_form_result(form, code)
        assert len(form) <= FORM_LENGTH
        assert form[0] == code

    assert form == [FormCode.LOSS, FormCode.DRAW, FormCode.WIN, FormCode.WIN, FormCode.LOSS]


def test_push_form_result_leaves_input_untouched() -> None:
    history = [FormCode.DRAW]

    push_form_result(history, FormCode.WIN)

    assert history == [FormCode.DRAW]
