from .dates import format_visit_date
from .email import InlineAttachment, SmtpMailer
from .background_tasks import TaskRegistry
