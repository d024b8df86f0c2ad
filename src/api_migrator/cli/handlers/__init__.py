from .convert import handle_convert
from .recipes import handle_recipes
