"""Domain Services.

Presentation-side transforms applied to rows between the storage adapters
and the route handlers.
"""

from anak_trials.domain.services.anonymizer import Anonymizer
from anak_trials.domain.services.formatter import format_birth_date, format_child, format_children

__all__ = ['Anonymizer', 'format_birth_date', 'format_child', 'format_children']
