"""SQLModel table models; import here so metadata is populated."""

from investpro.models.company import Company  # noqa: F401
from investpro.models.investment import Investment  # noqa: F401
from investpro.models.subscription import InvestorInvestment  # noqa: F401
from investpro.models.user import User  # noqa: F401
