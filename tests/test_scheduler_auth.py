from shoreline_server.auth.scheduler import is_scheduler_authorized

SECRET = "s3cr3t-value-long-enough"


class TestSchedulerAuthorization:
    def test_matching_token(self):
        assert is_scheduler_authorized(f"Bearer {SECRET}", SECRET)

    def test_scheme_is_case_insensitive(self):
        assert is_scheduler_authorized(f"bearer {SECRET}", SECRET)

    def test_wrong_token(self):
        assert not is_scheduler_authorized("Bearer s3cr3t-value-long-enougH", SECRET)

    def test_missing_header(self):
        assert not is_scheduler_authorized(None, SECRET)
        assert not is_scheduler_authorized("", SECRET)
        assert not is_scheduler_authorized("Bearer", SECRET)
        assert not is_scheduler_authorized(SECRET, SECRET)

    def test_other_scheme(self):
        assert not is_scheduler_authorized(f"Basic {SECRET}", SECRET)

    def test_short_token_is_rejected(self):
        assert not is_scheduler_authorized("Bearer short", SECRET)
        assert not is_scheduler_authorized("Bearer short", "short", min_length=16)

    def test_short_secret_disables_scheduler_access(self):
        secret = "tooshort"
        assert not is_scheduler_authorized(f"Bearer {secret}", secret)

    def test_unset_secret_disables_scheduler_access(self):
        assert not is_scheduler_authorized("Bearer ", None)
        assert not is_scheduler_authorized(f"Bearer {SECRET}", None)
        assert not is_scheduler_authorized(f"Bearer {SECRET}", "")

    def test_custom_min_length(self):
        assert is_scheduler_authorized("Bearer abcd", "abcd", min_length=4)
        assert not is_scheduler_authorized("Bearer abcd", "abcd", min_length=5)
