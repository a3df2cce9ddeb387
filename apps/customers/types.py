# apps/customers/types.py
"""
Fixed-shape records for the JSON columns stored on Customer.

The ORM keeps plain dicts in JSONField columns; these classes are the only
place those dicts are read or written.
"""
from dataclasses import dataclass, asdict, fields
from decimal import Decimal, InvalidOperation

from rest_framework.fields import BooleanField

from core.constants import PaymentModes
from core.exceptions import ValidationError


def _known(cls, data):
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


def _flag(name, value):
    """Booleans plus the true/false spellings DRF accepts; "false" stays False"""
    if value is None:
        return False
    if isinstance(value, (bool, int, str)):
        if value in BooleanField.TRUE_VALUES:
            return True
        if value in BooleanField.FALSE_VALUES:
            return False
    raise ValidationError(f'{name} must be true or false')


@dataclass(frozen=True)
class PriorityFlags:
    senior_citizen: bool = False
    pregnant: bool = False
    pwd: bool = False

    @classmethod
    def from_dict(cls, data):
        return cls(**{k: _flag(k, v) for k, v in _known(cls, data).items()})

    def to_dict(self):
        return asdict(self)

    @property
    def is_priority(self):
        return self.senior_citizen or self.pregnant or self.pwd

    def labels(self):
        """Human-readable list of every flag that is set"""
        result = []
        if self.senior_citizen:
            result.append('Senior Citizen')
        if self.pwd:
            result.append('PWD')
        if self.pregnant:
            result.append('Pregnant')
        return result


@dataclass(frozen=True)
class Prescription:
    od: str = ''
    os: str = ''
    ou: str = ''
    pd: str = ''
    add: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(**{k: '' if v is None else str(v) for k, v in _known(cls, data).items()})

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PaymentInfo:
    mode: str = PaymentModes.CASH
    amount: Decimal = Decimal('0')

    @classmethod
    def from_dict(cls, data):
        data = _known(cls, data)
        mode = data.get('mode') or PaymentModes.CASH
        try:
            amount = Decimal(str(data.get('amount') or 0))
        except (InvalidOperation, ValueError):
            amount = Decimal('0')
        return cls(mode=mode, amount=amount)

    def to_dict(self):
        return {'mode': self.mode, 'amount': str(self.amount)}


@dataclass(frozen=True)
class EstimatedTime:
    days: int = 0
    hours: int = 0
    minutes: int = 0

    @classmethod
    def from_dict(cls, data):
        return cls(**{k: int(v or 0) for k, v in _known(cls, data).items()})

    @classmethod
    def from_minutes(cls, total):
        days, rest = divmod(int(total), 24 * 60)
        hours, minutes = divmod(rest, 60)
        return cls(days=days, hours=hours, minutes=minutes)

    def to_dict(self):
        return asdict(self)

    @property
    def total_minutes(self):
        return self.days * 24 * 60 + self.hours * 60 + self.minutes
