from frontend.admin_dashboard import pending_stands
from frontend.ads import parse_image_urls, validate_ad
from frontend.navbar import SUPPORT_STAND, links_for, support_lead
from frontend.roles import Role
from frontend.stand_dashboard import is_approved, stand_name_of
from frontend.stands import find_stand, stock_counts


def test_navbar_links_by_role():
    anon = [path for _, path in links_for(False, Role.VISITOR)]
    assert "/login" in anon and "/dashboard" not in anon

    stand = [path for _, path in links_for(True, Role.STAND)]
    assert "/anunciar" in stand and "/admin" not in stand

    admin = [path for _, path in links_for(True, Role.ADMIN)]
    assert "/admin" in admin and "/anunciar" not in admin


def test_support_lead_targets_central_support():
    lead = support_lead(" Ana ", "ANA@mail.pt", "Não consigo entrar")
    assert lead["stand_name"] == SUPPORT_STAND
    assert lead["message"] == "[SUPORTE CENTRAL] Não consigo entrar"
    assert lead["customer_email"] == "ana@mail.pt"


def test_find_stand_by_slug():
    stands = [{"stand_name": "Stand Águia"}, {"stand_name": "Auto Norte"}]
    assert find_stand(stands, "auto-norte") == {"stand_name": "Auto Norte"}
    assert find_stand(stands, "stand-aguia") == {"stand_name": "Stand Águia"}
    assert find_stand(stands, "outro") is None


def test_stock_counts():
    cars = [{"stand_name": "A"}, {"stand_name": "A"}, {"stand_name": "B"}]
    assert stock_counts(cars) == {"A": 2, "B": 1}


def test_dealer_approval():
    assert is_approved({"status": "approved"}, Role.STAND)
    assert not is_approved({"status": "pending"}, Role.STAND)
    assert not is_approved(None, Role.STAND)
    assert is_approved(None, Role.ADMIN)


def test_stand_name_fallbacks():
    assert stand_name_of({"stand_name": "Perfil"}, {"stand_name": "Meta"}) == "Perfil"
    assert stand_name_of({}, {"stand_name": "Meta"}) == "Meta"
    assert stand_name_of(None, {}) == "Sem Nome"


def test_ad_validation():
    base = {"brand": "BMW", "model": "X1", "images": parse_image_urls("a.jpg\n\n b.jpg \n")}
    assert base["images"] == ["a.jpg", "b.jpg"]
    assert validate_ad(base) is None
    assert validate_ad({**base, "images": []}) == "Adicione pelo menos uma imagem."
    assert validate_ad({**base, "images": ["x"] * 11}) == "Máximo de 10 imagens por anúncio."
    assert validate_ad({**base, "brand": ""}) == "Indique a marca e o modelo."


def test_pending_stands():
    profiles = [
        {"role": "stand", "status": "pending"},
        {"role": "stand", "status": "approved"},
        {"role": "visitor", "status": "pending"},
    ]
    assert pending_stands(profiles) == [{"role": "stand", "status": "pending"}]
