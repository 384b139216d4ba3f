from .common import BaseResponse, Error, ErrorCode
from .pagination import PaginatedEnvelope, PageParams
from .wallet import TimeFrame, WalletStats
from .profile import CommentCreate, ProfileUpdate, TagCreate
