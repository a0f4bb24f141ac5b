from qrmenu.models.user import User
from qrmenu.models.restaurant import Restaurant
from qrmenu.models.menu import Menu
from qrmenu.models.menu_item import MenuItem
