# Vehicle Permits — Database Models
# Import all models here for SQLAlchemy discovery

from vehicle_permits.models.employee import Employee          # noqa
from vehicle_permits.models.hr_user import HrUser             # noqa
from vehicle_permits.models.permit import Permit              # noqa
from vehicle_permits.models.notification import Notification  # noqa
