"""Home, help, and about pages."""

from xitzin import Request, Xitzin

from ..engine.vocabulary import ABBREVIATIONS, VERBS


def register_routes(app: Xitzin) -> None:
    """Register the pages that need no certificate."""

    @app.gemini("/", name="home")
    def home(request: Request):
        world = app.state.world
        return app.template("home.gmi", max_score=world.max_score)

    @app.gemini("/help", name="help")
    def help_page(request: Request):
        verbs = sorted(v for v in VERBS if v not in ("yes", "no"))
        abbreviations = sorted(ABBREVIATIONS.items())
        return app.template("help.gmi", verbs=verbs, abbreviations=abbreviations)

    @app.gemini("/about", name="about")
    def about(request: Request):
        return app.template("about.gmi")
