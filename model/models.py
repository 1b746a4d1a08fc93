# model/models.py
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple

MAX_CHARMS = 7


@dataclass(frozen=True)
class Bracelet:
    id: str
    name: str
    price: float
    image: str
    # "Open chain" variant is the backdrop used while composing
    open_image: Optional[str] = None
    description: str = ""
    color: str = ""
    material: str = ""
    grayscale: bool = False

    @property
    def backdrop(self):
        return self.open_image or self.image


@dataclass(frozen=True)
class Charm:
    id: str
    name: str
    price: float
    category: str = ""
    tags: Tuple[str, ...] = ()
    image: Optional[str] = None
    model_path: Optional[str] = None       # optional 3D model (.glb / .obj)
    background: Optional[str] = None       # optional decorative background
    description: str = ""


@dataclass(frozen=True)
class CharmInstance:
    """One placed occurrence of a charm. instance_id, not charm.id, is its identity."""
    instance_id: str
    charm: Charm


def new_instance_id(charm):
    # uuid4 keeps rapid repeated adds of the same charm collision-free
    return f"{charm.id}-{uuid.uuid4().hex}"


def new_cart_item_id():
    return f"cart-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class CartLineItem:
    id: str
    bracelet: Bracelet
    charms: Tuple[CharmInstance, ...]
    # instance_id -> slot index in the layout for len(charms)
    charm_positions: Dict[str, int] = field(default_factory=dict)
    preview_image: Optional[bytes] = None  # PNG

    @property
    def total(self):
        return self.bracelet.price + sum(ci.charm.price for ci in self.charms)


@dataclass(frozen=True)
class SelectionState:
    bracelet: Optional[Bracelet] = None
    charms: Tuple[CharmInstance, ...] = ()
    cart: Tuple[CartLineItem, ...] = ()
    show_charm_backgrounds: bool = True


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderCharm:
    instance_id: str
    charm_id: str


@dataclass(frozen=True)
class OrderLine:
    """Minimal persisted snapshot of a line: ids only, re-joined at display time."""
    line_id: str
    bracelet_id: str
    charms: Tuple[OrderCharm, ...] = ()
    positions: Optional[Dict[str, int]] = None


@dataclass(frozen=True)
class Order:
    user_id: str
    items: Tuple[OrderLine, ...]
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    preview_image: Optional[bytes] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
