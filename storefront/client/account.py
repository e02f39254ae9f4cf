from storefront.client.schemas import Profile, Session
from storefront.client.session import guarded, landing_path
from storefront.validation import (
    ensure_valid,
    normalize_contact,
    normalize_email,
    validate_profile,
    validate_signup,
)


class Account:
    def __init__(self, ctx):
        self.ctx = ctx

    @property
    def session(self):
        return self.ctx.session

    def signup(self, name, email, password, role="customer") -> dict:
        email = normalize_email(email)
        ensure_valid(validate_signup(name, email, password, role))
        return self.ctx.api.signup(name.strip(), email, password, role)

    def login(self, email, password) -> Session:
        data = self.ctx.api.login(normalize_email(email), password)
        session = Session(
            user_id=data["id"],
            username=data.get("name") or "",
            role=data["role"],
            token=data["token"],
        )
        self.ctx.sign_in(session)
        return session

    def logout(self):
        self.ctx.sign_out()

    def landing_path(self) -> str:
        return landing_path(self.session)

    @guarded()
    def get_profile(self) -> Profile:
        return Profile.model_validate(self.ctx.api.get_profile(self.session.user_id))

    @guarded()
    def update_profile(self, name, address="", phone_number="") -> Profile:
        phone_number = normalize_contact(phone_number)
        ensure_valid(validate_profile(name, phone_number))
        data = self.ctx.api.update_profile(self.session.user_id, name, address, phone_number)
        profile = Profile.model_validate(data["profile"])
        if profile.name != self.session.username:
            # keep the stored display name in step with the profile
            self.ctx.sign_in(self.session.model_copy(update={"username": profile.name}))
        return profile
