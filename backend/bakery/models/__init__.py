from .staff import Staff, SessionToken
from .inventory import Product, Ingredient, PersonalStock, Recipe, Supplier, SupplyRequest
from .documents import Transfer, ProductionBatch
from .sales import Customer, Order, PaymentConfirmation, DailySales
from .logs import WasteLog, IngredientStockLog, ProductionLog, IndirectCost, DirectCost, Expense
from .timekeeping import Attendance
from .payroll import Wage
from .communications import Announcement, StaffReport

__all__ = [
    'Staff', 'SessionToken',
    'Product', 'Ingredient', 'PersonalStock', 'Recipe', 'Supplier', 'SupplyRequest',
    'Transfer', 'ProductionBatch',
    'Customer', 'Order', 'PaymentConfirmation', 'DailySales',
    'WasteLog', 'IngredientStockLog', 'ProductionLog', 'IndirectCost', 'DirectCost', 'Expense',
    'Attendance',
    'Wage',
    'Announcement', 'StaffReport',
]
