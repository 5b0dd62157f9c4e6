from . import database as database
