from . import crud_order
