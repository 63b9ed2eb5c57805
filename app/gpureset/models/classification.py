"""Classification models.

Every inventory item is labelled exactly once, together with the rule
that decided it.
"""

from dataclasses import dataclass
from enum import Enum

from gpureset.models.inventory import InventoryItem

# Rule id recorded when no rule matched.
DEFAULT_RULE = "default:stock"


class Label(str, Enum):
    """Classification label.

    Attributes:
        FOREIGN: Belongs to the out-of-distribution vendor stack.
        STOCK: Distribution default; preserved.
    """

    FOREIGN = "foreign"
    STOCK = "stock"


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Label assigned to one inventory item.

    Attributes:
        item: The classified item.
        label: FOREIGN or STOCK.
        rule: Audit id of the deciding rule (``default:stock`` when none matched).
    """

    item: InventoryItem
    label: Label
    rule: str = DEFAULT_RULE

    @property
    def is_foreign(self) -> bool:
        """Check if the item was labelled foreign."""
        return self.label == Label.FOREIGN
