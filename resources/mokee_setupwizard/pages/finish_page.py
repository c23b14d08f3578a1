"""Final page of the wizard; its next button starts using the device."""

from ..models.page import Page, create_page
from ..models.strings import R


KEY = "FinishPage"


def create_finish_page() -> Page:
    return create_page(
        KEY, R.SETUP_COMPLETE,
        next_button_title_id=R.START,
        layout="finish",
        extra={"summary": R.FINISH_SUMMARY}
    )
