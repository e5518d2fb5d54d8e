import pytest
from sqlalchemy.future import select

from chauffeur.models.audit import Audit


@pytest.mark.auth
class TestAuth:

    @pytest.mark.asyncio
    async def test_login(self, test_client, admin_user):
        res = await test_client.post("/auth/login", data={"username": "admin", "password": "secret-pass"})

        assert res.status_code == 200, res.text
        assert res.json()["token_type"] == "bearer"

        token = res.json()["access_token"]
        res = await test_client.get("/pricing/", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 200

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client, admin_user):
        res = await test_client.post("/auth/login", data={"username": "admin", "password": "nope"})

        assert res.status_code == 400
        assert res.json()["detail"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_admin_routes_need_token(self, test_client):
        res = await test_client.get("/pricing/")
        assert res.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client):
        res = await test_client.get("/pricing/", headers={"Authorization": "Bearer not-a-token"})
        assert res.status_code == 401

    @pytest.mark.asyncio
    async def test_staff_cannot_manage_pricing(self, test_client, staff_headers):
        res = await test_client.get("/pricing/", headers=staff_headers)
        assert res.status_code == 403


@pytest.mark.crud
class TestVehicles:

    @pytest.mark.asyncio
    async def test_create_and_list(self, test_client, create_vehicle_factory):
        await create_vehicle_factory("Executive MPV", numberOfPassengers=7, listPriority=2)
        await create_vehicle_factory("Executive Saloon", numberOfPassengers=3, listPriority=1)
        await create_vehicle_factory("Retired Limousine", isActive=False)

        res = await test_client.get("/vehicles/")

        assert res.status_code == 200
        names = [v["categoryName"] for v in res.json()]
        assert names == ["Executive Saloon", "Executive MPV"]

    @pytest.mark.asyncio
    async def test_filter_by_passengers(self, test_client, create_vehicle_factory):
        await create_vehicle_factory("Executive MPV", numberOfPassengers=7)
        await create_vehicle_factory("Executive Saloon", numberOfPassengers=3)

        res = await test_client.get("/vehicles/", params={"passengers": 5})
        assert [v["categoryName"] for v in res.json()] == ["Executive MPV"]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, test_client, admin_headers, create_vehicle_factory):
        vehicle = await create_vehicle_factory()

        res = await test_client.put(
            f"/vehicles/{vehicle['id']}", json={"numberOfPassengers": 4}, headers=admin_headers
        )
        assert res.status_code == 200
        assert res.json()["numberOfPassengers"] == 4

        res = await test_client.delete(f"/vehicles/{vehicle['id']}", headers=admin_headers)
        assert res.json() == {"deleted": True}

        res = await test_client.get(f"/vehicles/{vehicle['id']}")
        assert res.status_code == 404

    @pytest.mark.asyncio
    async def test_staff_cannot_create(self, test_client, staff_headers):
        res = await test_client.post("/vehicles/", json={"categoryName": "Saloon"}, headers=staff_headers)
        assert res.status_code == 403


@pytest.mark.crud
@pytest.mark.pricing
class TestPricingAdmin:

    @pytest.mark.asyncio
    async def test_create_pricing(self, create_vehicle_factory, create_pricing_factory):
        vehicle = await create_vehicle_factory()
        pricing = await create_pricing_factory(vehicle["id"])

        assert pricing["pricingType"] == "p2p"
        assert pricing["coverageZone"] == "Entire UK Cover"
        assert pricing["status"] == "active"
        assert pricing["pointToPoint"]["distanceTiers"][0]["price"] == 74.5
        assert pricing["extras"]["congestionCharge"] == 15

    @pytest.mark.asyncio
    async def test_duplicate_pricing(self, test_client, admin_headers, create_vehicle_factory, create_pricing_factory):
        vehicle = await create_vehicle_factory()
        await create_pricing_factory(vehicle["id"])

        res = await test_client.post(
            "/pricing/", json={"vehicleId": vehicle["id"], "pricingType": "p2p"}, headers=admin_headers
        )

        assert res.status_code == 400
        assert "already exists" in res.json()["detail"]

    @pytest.mark.asyncio
    async def test_same_type_in_other_zone(self, create_vehicle_factory, create_pricing_factory):
        vehicle = await create_vehicle_factory()
        await create_pricing_factory(vehicle["id"])

        pricing = await create_pricing_factory(vehicle["id"], coverageZone="London")
        assert pricing["coverageZone"] == "London"

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, test_client, admin_headers):
        res = await test_client.post("/pricing/", json={"vehicleId": 999, "pricingType": "p2p"}, headers=admin_headers)
        assert res.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"pricingType": "airport"},
        {"pointToPoint": {"distanceTiers": [
            {"fromDistance": 0, "toDistance": 10, "price": 50},
            {"fromDistance": 8, "toDistance": 30, "price": 2.5, "kind": "per_mile"},
        ]}},
        {"pointToPoint": {"distanceTiers": [{"fromDistance": 10, "toDistance": 5, "price": 50}]}},
        {"pointToPoint": {"distanceTiers": [{"fromDistance": 0, "toDistance": 8, "price": -1}]}},
    ])
    async def test_invalid_pricing(self, test_client, admin_headers, create_vehicle_factory, overrides):
        vehicle = await create_vehicle_factory()
        data = {"vehicleId": vehicle["id"], "pricingType": "p2p"}
        data.update(overrides)

        res = await test_client.post("/pricing/", json=data, headers=admin_headers)
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_list_filters(self, test_client, admin_headers, create_vehicle_factory, create_pricing_factory):
        first = await create_vehicle_factory()
        second = await create_vehicle_factory("Executive MPV")
        await create_pricing_factory(first["id"])
        await create_pricing_factory(second["id"])

        res = await test_client.get("/pricing/", params={"vehicle_id": second["id"]}, headers=admin_headers)

        assert res.status_code == 200
        assert [p["vehicleId"] for p in res.json()] == [second["id"]]

    @pytest.mark.asyncio
    async def test_update_pricing(self, test_client, admin_headers, create_vehicle_factory, create_pricing_factory):
        vehicle = await create_vehicle_factory()
        pricing = await create_pricing_factory(vehicle["id"])

        res = await test_client.put(
            f"/pricing/{pricing['id']}",
            json={"priceRoundOff": True, "status": "inactive"},
            headers=admin_headers,
        )

        assert res.status_code == 200, res.text
        assert res.json()["priceRoundOff"] is True
        assert res.json()["status"] == "inactive"

        # inactive tables are not quoted
        res = await test_client.post("/quotes/calc", json={"vehicleId": vehicle["id"], "distanceMiles": 20})
        assert res.status_code == 404

    @pytest.mark.asyncio
    async def test_update_into_existing_zone(
        self, test_client, admin_headers, create_vehicle_factory, create_pricing_factory
    ):
        vehicle = await create_vehicle_factory()
        await create_pricing_factory(vehicle["id"])
        london = await create_pricing_factory(vehicle["id"], coverageZone="London")

        res = await test_client.put(
            f"/pricing/{london['id']}", json={"coverageZone": "Entire UK Cover"}, headers=admin_headers
        )
        assert res.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_zone_rejected_on_update(
        self, test_client, admin_headers, create_vehicle_factory, create_pricing_factory
    ):
        vehicle = await create_vehicle_factory()
        pricing = await create_pricing_factory(vehicle["id"])

        res = await test_client.put(f"/pricing/{pricing['id']}", json={"coverageZone": ""}, headers=admin_headers)
        assert res.status_code == 422

        res = await test_client.get(f"/pricing/{pricing['id']}", headers=admin_headers)
        assert res.json()["coverageZone"] == "Entire UK Cover"

    @pytest.mark.asyncio
    async def test_delete_pricing(self, test_client, admin_headers, create_vehicle_factory, create_pricing_factory):
        vehicle = await create_vehicle_factory()
        pricing = await create_pricing_factory(vehicle["id"])

        res = await test_client.delete(f"/pricing/{pricing['id']}", headers=admin_headers)
        assert res.json() == {"deleted": True}

        res = await test_client.get(f"/pricing/{pricing['id']}", headers=admin_headers)
        assert res.status_code == 404


@pytest.mark.crud
@pytest.mark.locations
class TestLocationsAdmin:

    LOCATION = {
        "name": "London Gatwick Airport",
        "address": "Horley, Gatwick RH6 0NP, UK",
        "placeId": "gatwick-place",
        "iataCode": "lgw",
        "icaoCode": "egkk",
        "lat": 51.1537,
        "lng": -0.1821,
    }

    @pytest.mark.asyncio
    async def test_create_location(self, test_client, admin_headers):
        res = await test_client.post("/locations/", json=self.LOCATION, headers=admin_headers)

        assert res.status_code == 201, res.text
        body = res.json()
        assert body["iataCode"] == "LGW"
        assert body["icaoCode"] == "EGKK"
        assert body["radiusKm"] == 5
        assert body["locationType"] == "airport"

    @pytest.mark.asyncio
    async def test_duplicate_place_id(self, test_client, admin_headers):
        await test_client.post("/locations/", json=self.LOCATION, headers=admin_headers)
        res = await test_client.post("/locations/", json=self.LOCATION, headers=admin_headers)

        assert res.status_code == 400

    @pytest.mark.asyncio
    async def test_radius_limits(self, test_client, admin_headers):
        res = await test_client.post("/locations/", json={**self.LOCATION, "radiusKm": 60}, headers=admin_headers)
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_update_and_delete(self, test_client, admin_headers):
        res = await test_client.post("/locations/", json=self.LOCATION, headers=admin_headers)
        location_id = res.json()["id"]

        res = await test_client.put(
            f"/locations/{location_id}", json={"radiusKm": 8, "isActive": False}, headers=admin_headers
        )
        assert res.json()["radiusKm"] == 8
        assert res.json()["isActive"] is False

        res = await test_client.get("/locations/", params={"active_only": True}, headers=admin_headers)
        assert res.json() == []

        res = await test_client.delete(f"/locations/{location_id}", headers=admin_headers)
        assert res.json() == {"deleted": True}


@pytest.mark.crud
class TestAirportPricingAdmin:

    async def _location(self, test_client, admin_headers):
        res = await test_client.post(
            "/locations/",
            json={"name": "Wembley Stadium", "address": "London HA9 0WS", "locationType": "stadium",
                  "lat": 51.5560, "lng": -0.2795, "radiusKm": 2},
            headers=admin_headers,
        )
        return res.json()

    @pytest.mark.asyncio
    async def test_create_with_defaults(self, test_client, admin_headers, create_vehicle_factory, p2p_tiers):
        vehicle = await create_vehicle_factory()
        location = await self._location(test_client, admin_headers)

        res = await test_client.post(
            "/airport-pricing/",
            json={"locationId": location["id"], "vehicleId": vehicle["id"], "distanceTiers": p2p_tiers},
            headers=admin_headers,
        )

        assert res.status_code == 201, res.text
        body = res.json()
        assert body["afterDistanceThreshold"] == 50
        assert body["afterDistancePricePerMile"] == 2.5
        assert body["extras"]["extraStopPrice"] == 15
        assert body["displayParkingInclusive"] is True

    @pytest.mark.asyncio
    async def test_duplicate_and_lookups(self, test_client, admin_headers, create_vehicle_factory, p2p_tiers):
        vehicle = await create_vehicle_factory()
        location = await self._location(test_client, admin_headers)
        data = {"locationId": location["id"], "vehicleId": vehicle["id"], "distanceTiers": p2p_tiers}

        await test_client.post("/airport-pricing/", json=data, headers=admin_headers)
        res = await test_client.post("/airport-pricing/", json=data, headers=admin_headers)
        assert res.status_code == 400

        res = await test_client.get(f"/airport-pricing/location/{location['id']}", headers=admin_headers)
        assert len(res.json()) == 1

        res = await test_client.get(f"/airport-pricing/vehicle/{vehicle['id']}", headers=admin_headers)
        assert res.json()[0]["locationId"] == location["id"]

    @pytest.mark.asyncio
    async def test_unknown_location(self, test_client, admin_headers, create_vehicle_factory):
        vehicle = await create_vehicle_factory()

        res = await test_client.post(
            "/airport-pricing/", json={"locationId": 999, "vehicleId": vehicle["id"]}, headers=admin_headers
        )
        assert res.status_code == 404

    @pytest.mark.asyncio
    async def test_update_tiers(self, test_client, admin_headers, create_vehicle_factory, p2p_tiers):
        vehicle = await create_vehicle_factory()
        location = await self._location(test_client, admin_headers)
        res = await test_client.post(
            "/airport-pricing/",
            json={"locationId": location["id"], "vehicleId": vehicle["id"], "distanceTiers": p2p_tiers},
            headers=admin_headers,
        )
        pricing_id = res.json()["id"]

        res = await test_client.put(
            f"/airport-pricing/{pricing_id}",
            json={"distanceTiers": [{"fromDistance": 0, "toDistance": 10, "price": 60, "kind": "fixed"}]},
            headers=admin_headers,
        )

        assert res.status_code == 200, res.text
        assert len(res.json()["distanceTiers"]) == 1
        assert res.json()["distanceTiers"][0]["price"] == 60


@pytest.mark.audit
class TestAuditTrail:

    @pytest.mark.asyncio
    async def test_admin_changes_are_audited(
        self, db_session, admin_user, create_vehicle_factory, create_pricing_factory
    ):
        vehicle = await create_vehicle_factory()
        pricing = await create_pricing_factory(vehicle["id"])

        res = await db_session.execute(select(Audit).order_by(Audit.id))
        audits = res.scalars().all()

        assert [a.action for a in audits] == ["create_vehicle", "create_pricing"]
        assert audits[1].resource_id == pricing["id"]
        assert audits[1].user_id == admin_user.id
        assert len(audits[1].payload_hash) == 64

    @pytest.mark.asyncio
    async def test_login_is_audited(self, test_client, db_session, admin_user):
        await test_client.post("/auth/login", data={"username": "admin", "password": "secret-pass"})

        res = await db_session.execute(select(Audit))
        assert [a.action for a in res.scalars().all()] == ["login"]


@pytest.mark.integration
class TestMonitoring:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        res = await test_client.get("/health")

        assert res.status_code == 200
        assert res.json()["dependencies"]["database"] == "connected"
        assert res.json()["dependencies"]["redis"] == "disconnected"

    @pytest.mark.asyncio
    async def test_metrics(self, test_client):
        await test_client.get("/")
        res = await test_client.get("/metrics")

        assert res.status_code == 200
        assert "http_requests_total" in res.text
