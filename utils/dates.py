"""Date helpers shared by the validation rules."""
from datetime import date
from typing import Optional


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Full years between date_of_birth and today; one less if the birthday hasn't come yet this year."""
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age
