"""Session cart.

The cart is a value (CartState) changed only by ``reduce(state, action)``.
Lines are partitioned by purchase mode into three namespaces that never
affect each other: individual items, one group-buy selection and one
regional-group selection.

SessionCart binds a state to the browser session; nothing is written to
the database.
"""

from dataclasses import asdict, dataclass, replace
from decimal import Decimal

from django.db import models

from micaglow.core.money import round_money

CART_SESSION_KEY = "cart"


class PurchaseMode(models.TextChoices):
    INDIVIDUAL = "individual", "Individual"
    GROUP_BUY = "group-buy", "Group buy"
    REGIONAL_GROUP = "regional-group", "Regional group"


# Field that ties a single-selection namespace to one batch. A region can
# run several batches, so the regional namespace is keyed on the batch too.
SELECTION_FIELD = {
    PurchaseMode.GROUP_BUY: "batch_id",
    PurchaseMode.REGIONAL_GROUP: "batch_id",
}


@dataclass(frozen=True)
class CartItem:
    """One product line. Identity is (mode, id)."""

    id: str
    name: str
    price: Decimal
    quantity: int
    mode: str
    batch_id: int | None = None
    sub_group_id: int | None = None
    host_id: int | None = None
    max_quantity: int | None = None
    image_url: str = ""

    @property
    def key(self):
        return (self.mode, self.id)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self):
        data = asdict(self)
        data["price"] = str(self.price)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(**{**data, "price": Decimal(data["price"])})


@dataclass(frozen=True)
class CartState:
    items: tuple = ()

    @property
    def total(self) -> Decimal:
        return round_money(sum((item.line_total for item in self.items), Decimal("0")))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def for_mode(self, mode):
        return tuple(item for item in self.items if item.mode == mode)

    def get(self, item_id, mode):
        for item in self.items:
            if item.key == (mode, str(item_id)):
                return item
        return None

    def as_dict(self):
        return {
            "items": [
                {**item.to_dict(), "line_total": str(round_money(item.line_total))}
                for item in self.items
            ],
            "total": str(self.total),
            "item_count": self.item_count,
        }


# Actions


@dataclass(frozen=True)
class AddItem:
    item: CartItem
    quantity: int = 1


@dataclass(frozen=True)
class RemoveItem:
    item_id: str
    mode: str


@dataclass(frozen=True)
class UpdateQuantity:
    item_id: str
    mode: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class ClearMode:
    mode: str


def _clamp(quantity, max_quantity):
    if max_quantity is None:
        return quantity
    return min(quantity, max_quantity)


def _add(state, action):
    if action.quantity < 1:
        raise ValueError("Quantity to add must be at least 1")

    incoming = action.item
    items = list(state.items)

    # Group-buy and regional-group hold one selection: switching batch
    # drops the previous selection of that namespace.
    selection_field = SELECTION_FIELD.get(incoming.mode)
    if selection_field:
        selected = getattr(incoming, selection_field)
        items = [
            item for item in items
            if item.mode != incoming.mode or getattr(item, selection_field) == selected
        ]

    for index, item in enumerate(items):
        if item.key == incoming.key:
            quantity = _clamp(item.quantity + action.quantity, item.max_quantity)
            items[index] = replace(item, quantity=quantity)
            return CartState(items=tuple(items))

    quantity = _clamp(action.quantity, incoming.max_quantity)
    if quantity < 1:
        # Nothing left to sell
        return CartState(items=tuple(items))

    items.append(replace(incoming, quantity=quantity))
    return CartState(items=tuple(items))


def _update_quantity(state, action):
    key = (action.mode, str(action.item_id))
    items = []
    for item in state.items:
        if item.key != key:
            items.append(item)
            continue
        quantity = _clamp(action.quantity, item.max_quantity)
        if quantity > 0:
            items.append(replace(item, quantity=quantity))
    return CartState(items=tuple(items))


def reduce(state: CartState, action) -> CartState:
    """Apply one action to a cart state and return the new state.

    Args:
        state: Current cart
        action: AddItem, RemoveItem, UpdateQuantity, ClearCart or ClearMode

    Returns:
        A new CartState; the input is never modified.

    Raises:
        ValueError: AddItem with a quantity below 1
        TypeError: Unknown action
    """
    if isinstance(action, AddItem):
        return _add(state, action)

    if isinstance(action, RemoveItem):
        key = (action.mode, str(action.item_id))
        return CartState(items=tuple(item for item in state.items if item.key != key))

    if isinstance(action, UpdateQuantity):
        return _update_quantity(state, action)

    if isinstance(action, ClearCart):
        return CartState()

    if isinstance(action, ClearMode):
        return CartState(items=tuple(item for item in state.items if item.mode != action.mode))

    raise TypeError(f"Unknown cart action: {action!r}")


class SessionCart:
    """Cart state bound to one browser session."""

    def __init__(self, session):
        self.session = session
        self.state = CartState(
            items=tuple(CartItem.from_dict(data) for data in session.get(CART_SESSION_KEY, []))
        )

    def dispatch(self, action) -> CartState:
        self.state = reduce(self.state, action)
        self.session[CART_SESSION_KEY] = [item.to_dict() for item in self.state.items]
        self.session.modified = True
        return self.state


def get_cart(request) -> SessionCart:
    return SessionCart(request.session)
