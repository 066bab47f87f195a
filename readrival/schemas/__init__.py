from readrival.schemas.book import *
from readrival.schemas.challenge import *
from readrival.schemas.leaderboard import *
from readrival.schemas.library import *
from readrival.schemas.profile import *
from readrival.schemas.recommendation import *
from readrival.schemas.response import *
from readrival.schemas.social import *
from readrival.schemas.subscription import *
