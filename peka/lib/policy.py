"""Master password strength feedback (advisory; the store only requires non-empty)."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from peka.config.settings import MIN_MASTER_PASSWORD_LENGTH

SYMBOLS = '!@#$%^&*()_+-=[]{};\':"\\|,.<>/?`~'
COMMON_PATTERNS = ['password', 'qwerty', 'abc', '123', '111']


@dataclass
class PasswordCheck:
	score: int
	label: str
	errors: List[str] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.errors

	def feedback(self) -> str:
		text = f"{self.label} ({self.score}/100)"
		if self.errors: text += ' - ' + '; '.join(self.errors)
		return text


def _label(score: int) -> str:
	if score >= 80: return 'Very Strong'
	if score >= 60: return 'Strong'
	if score >= 40: return 'Moderate'
	if score >= 20: return 'Weak'
	return 'Very Weak'

def check_master_password(password: str, confirm: Optional[str] = None) -> PasswordCheck:
	if not password or not password.strip():
		return PasswordCheck(0, 'Very Weak', ['Password cannot be empty'])
	errors = []; score = 0
	L = len(password)
	if L >= MIN_MASTER_PASSWORD_LENGTH: score += 30
	else:
		if L >= 8: score += 20
		errors.append(f'Password must be at least {MIN_MASTER_PASSWORD_LENGTH} characters long')
	has_lower = any(c.islower() for c in password)
	has_upper = any(c.isupper() for c in password)
	has_digit = any(c.isdigit() for c in password)
	has_symbol = any(c in SYMBOLS for c in password)
	score += sum([has_lower, has_upper, has_digit, has_symbol]) * 15
	if not (has_lower and has_upper):
		errors.append('Password must include both uppercase and lowercase letters')
	if not has_digit:
		errors.append('Password must include at least one digit (0-9)')
	if not has_symbol:
		errors.append('Password must include at least one special character')
	if any(p in password.lower() for p in COMMON_PATTERNS):
		score -= 15
	if len(set(password)) < L * 0.6:
		score -= 10
	if confirm is not None and confirm != password:
		errors.append('Passwords do not match')
	score = max(0, min(100, score))
	return PasswordCheck(score, _label(score), errors)
