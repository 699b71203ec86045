APP_NAME = "Content Validation Gate"
APP_VERSION = "1.0.0"
DEFAULT_CORS_ALLOW_ORIGINS = [
	"http://localhost",
	"http://127.0.0.1",
	"http://localhost:3000",
]
DEFAULT_TRUSTED_HOSTS = [
	"127.0.0.1",
	"localhost",
	"testserver",
]

METHODS_WITHOUT_BODIES = (
	"GET",
	"HEAD",
	"OPTIONS",
	"DELETE",
)

# Route pipeline priorities; higher runs first.
CONTENT_NEGOTIATION_PRIORITY = -625
CONTENT_VALIDATION_PRIORITY = -650

CONTACT_INPUT_FILTER = "contacts.input_filter"

DEFAULT_CONTENT_VALIDATION = {
	"create_contact": CONTACT_INPUT_FILTER,
	"replace_contact": CONTACT_INPUT_FILTER,
	"update_contact": CONTACT_INPUT_FILTER,
}
