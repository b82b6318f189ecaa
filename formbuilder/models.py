from formbuilder.database import Base

# Import all models to register them with SQLAlchemy Base
from formbuilder.auth.models import User
from formbuilder.forms.models import Form, Question
from formbuilder.responses.models import Response, Answer
