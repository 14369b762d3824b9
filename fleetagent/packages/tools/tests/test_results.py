"""工具结果读取模型测试"""

from fleetagent.tools.results import (
    AssetInventory,
    CertificateListing,
    CVEDetails,
    ImageContract,
    RiskScore,
    SOPDocument,
    read_result,
)


class TestReadResult:
    """read_result() 测试"""

    def test_asset_inventory_from_list(self):
        """资产列表形式"""
        inventory = read_result(AssetInventory, [{"id": "a"}, {"id": "b"}])
        assert inventory.count == 2

    def test_asset_inventory_from_count(self):
        """{"count": n} 形式"""
        assert read_result(AssetInventory, {"count": 40}).count == 40

    def test_unreadable_returns_none(self):
        """无法读取时返回 None"""
        assert read_result(AssetInventory, "not an inventory") is None
        assert read_result(CVEDetails, {"severity": "high"}) is None
        assert read_result(RiskScore, None) is None

    def test_risk_score_defaults(self):
        """缺省字段使用默认值"""
        score = read_result(RiskScore, {"risk_level": "high"})
        assert score.risk_level == "high"
        assert score.score == 50.0

    def test_certificate_listing_from_list(self):
        """证书列表形式"""
        listing = read_result(
            CertificateListing,
            [{"id": "c1", "days_until_expiry": 3}, {"id": "c2", "days_until_expiry": 20}],
        )
        assert [c.id for c in listing.certificates] == ["c1", "c2"]

    def test_sop_document_unwraps_and_keeps_fields(self):
        doc = read_result(SOPDocument, {"sop": {"name": "restart-nginx", "steps": ["drain"], "owner": "sre"}})
        assert doc.name == "restart-nginx"
        assert doc.model_dump()["owner"] == "sre"

    def test_sop_document_string_body_unreadable(self):
        """{"sop": "..."} 不是对象，读取失败而不是抛异常"""
        assert read_result(SOPDocument, {"sop": "restart nginx"}) is None

    def test_image_contract_unwraps(self):
        contract = read_result(ImageContract, {"contract": {"name": "ubuntu-web"}})
        assert contract.name == "ubuntu-web"
        assert read_result(ImageContract, {"contract": ["x"]}) is None
