class TestActivate:
    def test_owner_activates(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        job = create_job(owner, make_category())

        r = client.post(f"/api/v1/jobs/{job['id']}/activate", headers=owner.headers)
        assert r.status_code == 200
        assert r.json() == {
            "outcome": "success",
            "message": "Job published successfully!",
            "redirect_to": "/api/v1/jobs/pending",
        }
        assert job_status(job["id"]) == "active"

        assert len(outbox) == 1
        assert outbox[0]["To"] == owner.email
        assert outbox[0]["X-Template"] == "job_published"
        assert "Logo Design Request" in outbox[0]["Subject"]

    def test_activate_twice_sends_one_mail(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        job = create_job(owner, make_category())

        client.post(f"/api/v1/jobs/{job['id']}/activate", headers=owner.headers)
        r = client.post(f"/api/v1/jobs/{job['id']}/activate", headers=owner.headers)
        assert r.status_code == 409
        assert r.json()["outcome"] == "conflict"
        assert job_status(job["id"]) == "active"
        assert len(outbox) == 1

    def test_stranger_cannot_activate(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        stranger = make_user()
        job = create_job(owner, make_category())

        r = client.post(f"/api/v1/jobs/{job['id']}/activate", headers=stranger.headers)
        assert r.status_code == 403
        assert r.json()["outcome"] == "denied"
        assert r.json()["message"] == "Permission denied!"
        assert job_status(job["id"]) == "inactive"
        assert outbox == []

    def test_elevated_roles_activate_any_job(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        admin = make_user(roles=("admin",))
        developer = make_user(roles=("developer",))
        category_id = make_category()
        first = create_job(owner, category_id)
        second = create_job(owner, category_id)

        assert client.post(f"/api/v1/jobs/{first['id']}/activate", headers=admin.headers).status_code == 200
        assert client.post(f"/api/v1/jobs/{second['id']}/activate", headers=developer.headers).status_code == 200
        assert job_status(first["id"]) == "active"
        assert job_status(second["id"]) == "active"
        # The owner is notified, not the reviewer.
        assert [m["To"] for m in outbox] == [owner.email, owner.email]

    def test_activate_missing_job(self, client, make_user):
        admin = make_user(roles=("admin",))
        r = client.post("/api/v1/jobs/999/activate", headers=admin.headers)
        assert r.status_code == 404
        assert r.json()["outcome"] == "not_found"

    def test_multiline_title_is_published(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        job = create_job(owner, make_category(), title="Logo\nDesign Request")

        r = client.post(f"/api/v1/jobs/{job['id']}/activate", headers=owner.headers)
        assert r.status_code == 200
        assert job_status(job["id"]) == "active"
        assert len(outbox) == 1
        assert outbox[0]["Subject"] == 'Your job "Logo Design Request" is live'


class TestDecline:
    def test_decline_with_reason(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        admin = make_user(roles=("admin",))
        job = create_job(owner, make_category())

        r = client.post(
            f"/api/v1/jobs/{job['id']}/decline",
            json={"reason": "Budget is unrealistic for the scope."},
            headers=admin.headers,
        )
        assert r.status_code == 200
        assert r.json()["message"] == "Job declined successfully!"
        assert job_status(job["id"]) == "declined"

        assert len(outbox) == 1
        assert outbox[0]["X-Template"] == "job_declined"
        assert outbox[0]["To"] == owner.email
        assert "Budget is unrealistic for the scope." in outbox[0].get_content()

    def test_decline_without_reason(self, client, make_user, make_category, create_job, outbox):
        owner = make_user()
        job = create_job(owner, make_category())

        r = client.post(f"/api/v1/jobs/{job['id']}/decline", headers=owner.headers)
        assert r.status_code == 200
        assert "No reason given." in outbox[0].get_content()

    def test_stranger_cannot_decline(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        stranger = make_user()
        job = create_job(owner, make_category())

        r = client.post(
            f"/api/v1/jobs/{job['id']}/decline",
            json={"reason": "nope"},
            headers=stranger.headers,
        )
        assert r.status_code == 403
        assert r.json()["redirect_to"] == "/api/v1/jobs/pending"
        assert job_status(job["id"]) == "inactive"
        assert outbox == []

    def test_cannot_decline_published_job(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        job = create_job(owner, make_category())
        client.post(f"/api/v1/jobs/{job['id']}/activate", headers=owner.headers)

        r = client.post(f"/api/v1/jobs/{job['id']}/decline", headers=owner.headers)
        assert r.status_code == 409
        assert job_status(job["id"]) == "active"
        assert len(outbox) == 1

    def test_multiline_title_is_declined(self, client, make_user, make_category, create_job, outbox, job_status):
        owner = make_user()
        admin = make_user(roles=("admin",))
        job = create_job(owner, make_category(), title="Logo\r\nDesign\tRequest")

        r = client.post(f"/api/v1/jobs/{job['id']}/decline", json={"reason": "Vague"}, headers=admin.headers)
        assert r.status_code == 200
        assert job_status(job["id"]) == "declined"
        assert outbox[0]["Subject"] == 'Your job "Logo Design Request" was declined'


class TestDelete:
    def test_owner_deletes(self, client, make_user, make_category, create_job, job_status):
        owner = make_user()
        job = create_job(owner, make_category())

        r = client.delete(f"/api/v1/jobs/{job['id']}", headers=owner.headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Job deleted successfully!"
        assert job_status(job["id"]) is None

        r = client.get(f"/api/v1/jobs/{job['id']}", headers=owner.headers)
        assert r.status_code == 404

    def test_stranger_cannot_delete(self, client, make_user, make_category, create_job, job_status):
        owner = make_user()
        stranger = make_user()
        job = create_job(owner, make_category())

        r = client.delete(f"/api/v1/jobs/{job['id']}", headers=stranger.headers)
        assert r.status_code == 403
        assert r.json()["message"] == "Permission denied!"
        assert job_status(job["id"]) == "inactive"

    def test_developer_deletes_any_job(self, client, make_user, make_category, create_job, job_status):
        owner = make_user()
        developer = make_user(roles=("developer",))
        job = create_job(owner, make_category())
        client.post(f"/api/v1/jobs/{job['id']}/activate", headers=owner.headers)

        r = client.delete(f"/api/v1/jobs/{job['id']}", headers=developer.headers)
        assert r.status_code == 200
        assert job_status(job["id"]) is None
