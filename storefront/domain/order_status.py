# storefront/domain/order_status.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# anulowac mozna tylko zamowienie ktore nie wyszlo jeszcze z magazynu
CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})

# statusy ktore moze ustawic panel admina
ADMIN_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.COMPLETED,
    OrderStatus.SHIPPED,
    OrderStatus.CANCELLED,
})

# statusy przychodzace z webhooka
WEBHOOK_STATUSES = frozenset({
    OrderStatus.PROCESSING,
    OrderStatus.COMPLETED,
    OrderStatus.SHIPPED,
    OrderStatus.REFUNDED,
    OrderStatus.CANCELLED,
})


# koniec cyklu zycia, jedyne wyjscie to zwrot po wydaniu towaru
TERMINAL = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.SHIPPED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})
REFUNDABLE = frozenset({OrderStatus.COMPLETED, OrderStatus.SHIPPED})


def _value(status) -> str:
    return status.value if isinstance(status, OrderStatus) else status


def can_be_cancelled(status) -> bool:
    return _value(status) in {s.value for s in CANCELLABLE}


def can_transition(current, new) -> bool:
    """Zwykly zapis statusu (bez anulowania) z current do new."""
    current = _value(current)
    if current not in {s.value for s in TERMINAL}:
        return True
    return _value(new) == OrderStatus.REFUNDED.value and current in {s.value for s in REFUNDABLE}


def parse_status(value: str, allowed=frozenset(OrderStatus)) -> OrderStatus | None:
    """Zwraca status z enuma albo None gdy wartosc jest nieznana lub niedozwolona."""
    try:
        status = OrderStatus(value)
    except ValueError:
        return None
    if status not in allowed:
        return None
    return status
