import asyncio
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

import mongomock
from jose import jwt
from pymongo.errors import ServerSelectionTimeoutError

import config
import database
from main import app, lifespan
from security import create_access_token, hash_password, verify_password
from tests.base import ADMIN_CREDENTIALS, ApiTestCase


class SignupLoginTests(ApiTestCase):
    def test_signup_creates_single_admin(self):
        self.assertEqual(self.client.get("/api/auth/check-admin").json(), {"adminExists": False})

        response = self.client.post("/api/auth/signup", json=ADMIN_CREDENTIALS)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["message"], "Admin created successfully")
        self.assertEqual(body["admin"]["email"], "owner@example.com")
        self.assertTrue(body["token"])

        stored = self.db["admin"].find_one()
        self.assertNotEqual(stored["password"], ADMIN_CREDENTIALS["password"])
        self.assertTrue(verify_password(ADMIN_CREDENTIALS["password"], stored["password"]))
        self.assertEqual(self.client.get("/api/auth/check-admin").json(), {"adminExists": True})

    def test_second_signup_is_rejected(self):
        self.signup()
        response = self.client.post(
            "/api/auth/signup",
            json={"name": "Intruder", "email": "other@example.com", "password": "another-pass"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Admin already exists. Only one admin is allowed.")
        self.assertEqual(self.db["admin"].count_documents({}), 1)

    def test_signup_validation(self):
        response = self.client.post("/api/auth/signup", json={"name": "A", "email": "bad", "password": "123"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual({e["field"] for e in response.json()["errors"]}, {"name", "email", "password"})

    def test_login(self):
        self.signup()
        response = self.client.post(
            "/api/auth/login",
            json={"email": "Owner@Example.com", "password": ADMIN_CREDENTIALS["password"]},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Login successful")
        self.assertEqual(body["admin"]["id"], self.admin["id"])

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json(), {"admin": self.admin})

    def test_login_bad_credentials(self):
        self.signup()
        for creds in (
            {"email": "owner@example.com", "password": "wrong-password"},
            {"email": "nobody@example.com", "password": ADMIN_CREDENTIALS["password"]},
        ):
            response = self.client.post("/api/auth/login", json=creds)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json(), {"message": "Invalid credentials"})

    def test_login_deactivated_admin(self):
        self.signup()
        self.db["admin"].update_one({}, {"$set": {"isActive": False}})
        response = self.client.post("/api/auth/login", json=ADMIN_CREDENTIALS)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Account is deactivated"})


class AuthGateTests(ApiTestCase):
    def assertRejected(self, headers=None):
        response = self.client.get("/api/admin/projects", headers=headers or {})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Not authorized"})

    def test_missing_token(self):
        self.signup()
        self.assertRejected()
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_non_bearer_scheme(self):
        self.assertRejected({"Authorization": "Basic b3duZXI6cGFzcw=="})

    def test_garbage_token(self):
        self.assertRejected({"Authorization": "Bearer not.a.jwt"})

    def test_token_signed_with_other_secret(self):
        self.signup()
        forged = jwt.encode(
            {"sub": self.admin["id"], "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            config.JWT_SECRET + "-other",
            algorithm="HS256",
        )
        self.assertRejected({"Authorization": f"Bearer {forged}"})

    def test_expired_token(self):
        self.signup()
        token = create_access_token(self.admin["id"], expires_delta=timedelta(seconds=-30))
        self.assertRejected({"Authorization": f"Bearer {token}"})

    def test_token_for_unknown_admin(self):
        self.assertRejected({"Authorization": f"Bearer {create_access_token('5f0000000000000000000000')}"})

    def test_token_for_deactivated_admin(self):
        headers = self.signup()
        self.db["admin"].update_one({}, {"$set": {"isActive": False}})
        self.assertRejected(headers)

    def test_valid_token(self):
        headers = self.signup()
        self.assertEqual(self.client.get("/api/admin/projects", headers=headers).status_code, 200)


class SingleAdminWithoutIndexesTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.indexed_db = self.db
        # Same client, but a database with none of the unique indexes
        self.db = self.mongo[self.db.name + "_bare"]
        app.dependency_overrides[database.get_db] = lambda: self.db

    def tearDown(self):
        self.mongo.drop_database(self.db.name)
        self.db = self.indexed_db
        super().tearDown()

    def test_second_signup_rejected_without_unique_index(self):
        self.signup()
        response = self.client.post(
            "/api/auth/signup",
            json={"name": "Intruder", "email": "other@example.com", "password": "another-pass"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Admin already exists. Only one admin is allowed."})
        self.assertEqual(self.db["admin"].count_documents({}), 1)


class StartupTests(unittest.TestCase):
    def test_startup_fails_when_indexes_cannot_be_created(self):
        unreachable = mock.MagicMock()
        unreachable.__getitem__.return_value.create_index.side_effect = ServerSelectionTimeoutError("db down")

        async def start():
            async with lifespan(app):
                pass

        with mock.patch.object(database, "db", unreachable), mock.patch.object(database, "client", None):
            with self.assertRaises(ServerSelectionTimeoutError):
                asyncio.run(start())

    def test_startup_creates_unique_indexes(self):
        store = mongomock.MongoClient()["portfolio_startup_test"]

        async def start():
            async with lifespan(app):
                pass

        with mock.patch.object(database, "db", store), mock.patch.object(database, "client", None):
            asyncio.run(start())
        self.assertTrue(store["admin"].index_information()["slot_1"]["unique"])
        self.assertTrue(store["home"].index_information()["slot_1"]["unique"])


class PasswordHashingTests(unittest.TestCase):
    def test_hash_round_trip(self):
        hashed = hash_password("hunter22")
        self.assertTrue(hashed.startswith("$pbkdf2-sha256$"))
        self.assertTrue(verify_password("hunter22", hashed))
        self.assertFalse(verify_password("hunter23", hashed))


if __name__ == "__main__":
    unittest.main()
