from . import crud_catalog
from . import crud_customer
from . import crud_quote
