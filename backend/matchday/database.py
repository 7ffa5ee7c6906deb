from databases import Database

from matchday.config import config

database = Database(config.pg_dsn)
