from __future__ import annotations

from functools import wraps

from flask import (
    Flask,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

import config
import identity
import posts
from cipher import Cipher, load_key
from errors import BlogError, ConfigError, NotFound
from store import JsonFileStore


if not config.SESSION_SECRET:
    raise ConfigError("SESSION_SECRET is not defined in the environment or .env file")

app = Flask(__name__)
app.secret_key = config.SESSION_SECRET
app.config.update(
    PERMANENT_SESSION_LIFETIME=config.SESSION_LIFETIME,
    SESSION_REFRESH_EACH_REQUEST=True,
    SESSION_COOKIE_HTTPONLY=True,
)
app.extensions["blog_store"] = JsonFileStore(config.DATA_DIR)
app.extensions["blog_cipher"] = Cipher(load_key(config.SECRET_KEY))


def get_store():
    return app.extensions["blog_store"]


def get_cipher() -> Cipher:
    return app.extensions["blog_cipher"]


def is_authenticated() -> bool:
    return g.user is not None


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_authenticated():
            return redirect(url_for("login", next=request.path))
        return view(*args, **kwargs)

    return wrapped


def local_next():
    """The ?next= target, only if it stays on this site."""
    target = request.args.get("next") or ""
    if target.startswith("/") and not target.startswith("//") and "\\" not in target:
        return target
    return None


def not_found():
    return NotFound.message, 404, {"Content-Type": "text/plain; charset=utf-8"}


@app.before_request
def load_session_context():
    g.session_ctx = identity.SessionContext(session)
    g.user = identity.current_user(get_store(), g.session_ctx)


@app.after_request
def save_session_context(response):
    ctx = g.get("session_ctx")
    if ctx is not None:
        ctx.apply_to(session)
        if "username" in session:
            # sliding expiry: the cookie is re-issued on every request
            session.permanent = True
    return response


@app.context_processor
def inject_globals():
    return {
        "site_title": config.SITE_TITLE,
        "site_description": config.SITE_DESCRIPTION,
        "user": g.get("user"),
        "is_authenticated": is_authenticated,
    }


@app.route("/")
def home():
    trending, recent = posts.list_home(get_store())
    welcome_message = identity.pop_welcome(g.session_ctx)
    return render_template(
        "index.html",
        trending_posts=trending,
        recent_posts=recent,
        welcome_message=welcome_message,
    )


@app.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        username_or_email = request.form.get("usernameOrEmail", "").strip()
        try:
            identity.login(
                get_store(),
                get_cipher(),
                g.session_ctx,
                username_or_email,
                request.form.get("password", ""),
            )
        except BlogError as exc:
            return render_template(
                "login.html", error_message=exc.message, username=username_or_email
            )
        return redirect(local_next() or url_for("home"))
    return render_template("login.html", error_message=None)


@app.route("/register", methods=["GET", "POST"])
def register():
    if request.method == "POST":
        try:
            identity.register(get_store(), get_cipher(), g.session_ctx, request.form)
        except BlogError as exc:
            form = {
                k: v for k, v in request.form.items() if k not in ("password", "confirmPassword")
            }
            return render_template("register.html", error_message=exc.message, form=form)
        return redirect(url_for("home"))
    return render_template("register.html", error_message=None, form={})


@app.route("/logout")
def logout():
    if identity.logout(g.session_ctx):
        app.logger.info("User %s logged out", g.user["username"] if g.user else "?")
    return redirect(url_for("home"))


@app.route("/contact")
def contact():
    return render_template("contact.html")


@app.route("/about")
def about():
    return render_template("about.html")


@app.route("/posts/new", methods=["GET", "POST"])
@login_required
def new_post():
    if request.method == "POST":
        try:
            posts.create_post(get_store(), request.form)
        except BlogError as exc:
            app.logger.info("Rejected new post: %s", exc.message)
            return render_template(
                "new_post.html", post=request.form, error_message=exc.message, is_new=True
            )
        return redirect(url_for("home"))
    return render_template("new_post.html", post={}, error_message=None, is_new=True)


@app.route("/posts/<int:post_id>")
def view_post(post_id: int):
    try:
        post = posts.get_post(get_store(), post_id)
    except NotFound:
        return not_found()
    return render_template(
        "post.html", post=post, content_html=posts.render_content(post.get("content"))
    )


@app.route("/posts/edit/<int:post_id>")
@login_required
def edit_post_form(post_id: int):
    try:
        post = posts.get_post(get_store(), post_id)
    except NotFound:
        return not_found()
    return render_template("new_post.html", post=post, error_message=None, is_new=False)


# Not gated on a session, same as delete below.
@app.route("/posts/edit/<int:post_id>", methods=["POST"])
def edit_post(post_id: int):
    try:
        posts.update_post(get_store(), post_id, request.form)
    except NotFound:
        return not_found()
    except BlogError as exc:
        post = dict(request.form.items(), id=post_id)
        return render_template(
            "new_post.html", post=post, error_message=exc.message, is_new=False
        )
    return redirect(url_for("home"))


@app.route("/posts/delete/<int:post_id>", methods=["POST"])
def delete_post(post_id: int):
    try:
        posts.delete_post(get_store(), post_id)
    except NotFound:
        return not_found()
    return redirect(url_for("home"))


if __name__ == "__main__":
    app.run(port=config.PORT)
