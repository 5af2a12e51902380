from gping.region_map import try_host_from_cloud_region


def test_host_from_aws():
    assert try_host_from_cloud_region("aws:eu-west-1") == "ec2.eu-west-1.amazonaws.com"


def test_host_from_gcp():
    assert (
        try_host_from_cloud_region("gcp:me-central2")
        == "storage.me-central2.rep.googleapis.com"
    )
    assert try_host_from_cloud_region("gcp:") == "cloud.google.com"


def test_host_from_foo():
    assert try_host_from_cloud_region("foo:bar") is None


def test_invalid_input():
    assert try_host_from_cloud_region("foo") is None