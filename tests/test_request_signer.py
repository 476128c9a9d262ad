"""
Unit tests for the signature engine, key derivation and header composition.
"""
import pytest
from datetime import datetime, timezone
from src.signing import (
    Aws4ChainSigner,
    AuthHeaderComposer,
    Credential,
    MalformedRequest,
    SdkHmacSigner,
    SignatureScheme,
    SigningError,
    SigningRequest,
    derive_signing_key,
    format_sdk_timestamp,
    mask_value,
    redact_authorization,
)

HOST = 'ocr.ap-southeast-1.myhuaweicloud.com'
TIMESTAMP = '20240101T000000Z'

# Known answers for credential TESTAK/TESTSK, POST /v2/ocr/general-text, body '{}'
SDK_SIGNATURE = '6ef645a824420a70e283694389eddf02ee42de65a936a8e22a335a37900c668a'
SDK_CANONICAL_HASH = 'aa9ef8c89d07306fc2e9d27bc6e9bdf09c653b48578d6da34dc2bc79aac78499'
AWS4_SIGNATURE = '525c7f846d24909592bd1ada2431e3021dd776eb44acf9d62a23c209dceecf34'
AWS4_CANONICAL_HASH = 'fecf072c88d8648368e9598e293ef24464f95b4d69a741a4fc3ecdb4e203370f'


def ocr_request(headers=None, body='{}'):
    if headers is None:
        headers = {'Host': HOST, 'Content-Type': 'application/json'}
    return SigningRequest('POST', '/v2/ocr/general-text', '', headers, body)


class TestSigningKeyDerivation:
    """Test the four-step HMAC chain."""

    def test_published_vector(self):
        """Matches the published AWS example for 20120215/us-east-1/iam."""
        key = derive_signing_key(
            'wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY',
            '20120215',
            'us-east-1',
            'iam'
        )

        assert key.hex() == 'f4780e2d9f65fa895f9c67b32ce1baf0b0d8a43505a000a1a9e090d414db404d'

    def test_deterministic(self):
        """Identical inputs give identical keys."""
        first = derive_signing_key('secret', '20240101', 'ap-southeast-1', 'ocr')
        second = derive_signing_key('secret', '20240101', 'ap-southeast-1', 'ocr')

        assert first == second
        assert len(first) == 32

    def test_scope_changes_key(self):
        """Each scope component narrows the key."""
        base = derive_signing_key('secret', '20240101', 'ap-southeast-1', 'ocr')

        assert derive_signing_key('secret', '20240102', 'ap-southeast-1', 'ocr') != base
        assert derive_signing_key('secret', '20240101', 'cn-north-4', 'ocr') != base
        assert derive_signing_key('secret', '20240101', 'ap-southeast-1', 'iam') != base


class TestSdkHmacSigner:
    """Test the single-HMAC strategy."""

    def test_known_signature(self, credential):
        """Signature matches the independently computed value."""
        signed = SdkHmacSigner(credential).sign(ocr_request(), TIMESTAMP)

        assert signed.scheme is SignatureScheme.SDK_HMAC_SHA256
        assert signed.string_to_sign == f'SDK-HMAC-SHA256\n{TIMESTAMP}\n{SDK_CANONICAL_HASH}'
        assert signed.signature == SDK_SIGNATURE
        assert signed.credential_scope is None

    def test_authorization_header_format(self, credential):
        """Authorization embeds algorithm, access key, signed headers and signature."""
        signed = SdkHmacSigner(credential).sign(ocr_request(), TIMESTAMP)

        assert signed.authorization == (
            'SDK-HMAC-SHA256 Access=TESTAK, '
            'SignedHeaders=content-type;host;x-sdk-date, '
            f'Signature={SDK_SIGNATURE}'
        )
        assert signed.headers['Authorization'] == signed.authorization

    def test_date_header_injected_with_signing_timestamp(self, credential):
        """The sent X-Sdk-Date equals the timestamp in the string to sign."""
        signed = SdkHmacSigner(credential).sign(ocr_request(), TIMESTAMP)

        assert signed.headers['X-Sdk-Date'] == TIMESTAMP
        assert signed.string_to_sign.split('\n')[1] == TIMESTAMP

    def test_matching_caller_date_header_accepted(self, credential):
        """A caller-supplied date equal to the timestamp gives the same signature."""
        headers = {'Host': HOST, 'Content-Type': 'application/json', 'X-Sdk-Date': TIMESTAMP}

        signed = SdkHmacSigner(credential).sign(ocr_request(headers), TIMESTAMP)

        assert signed.signature == SDK_SIGNATURE

    def test_mismatched_caller_date_header_rejected(self, credential):
        """A date header that disagrees with the signing timestamp is malformed."""
        headers = {'Host': HOST, 'X-Sdk-Date': '20231231T235959Z'}

        with pytest.raises(MalformedRequest):
            SdkHmacSigner(credential).sign(ocr_request(headers), TIMESTAMP)

    def test_deterministic(self, credential):
        """Signing twice with fixed inputs gives the same signature."""
        signer = SdkHmacSigner(credential)

        assert signer.sign(ocr_request(), TIMESTAMP).signature == signer.sign(ocr_request(), TIMESTAMP).signature

    def test_header_permutation_same_signature(self, credential):
        """Header order does not affect the signature."""
        signer = SdkHmacSigner(credential)
        reordered = {'Content-Type': 'application/json', 'Host': HOST}

        assert signer.sign(ocr_request(reordered), TIMESTAMP).signature == SDK_SIGNATURE

    def test_body_change_changes_signature(self, credential):
        """Tampering with the body changes the signature."""
        signed = SdkHmacSigner(credential).sign(ocr_request(body='{"image": "x"}'), TIMESTAMP)

        assert signed.signature != SDK_SIGNATURE

    def test_missing_secret_raises(self):
        """Empty secret key never produces an unsigned request."""
        with pytest.raises(SigningError):
            SdkHmacSigner(Credential('TESTAK', '')).sign(ocr_request(), TIMESTAMP)

    def test_missing_credential_raises(self):
        """No credential at all is a signing error."""
        with pytest.raises(SigningError):
            SdkHmacSigner(None).sign(ocr_request(), TIMESTAMP)

    def test_invalid_timestamp_rejected(self, credential):
        """Timestamps must be basic-format UTC."""
        with pytest.raises(MalformedRequest):
            SdkHmacSigner(credential).sign(ocr_request(), '2024-01-01T00:00:00Z')

    def test_sign_post_helper(self, credential):
        """sign_post signs a POST with the given body."""
        signed = SdkHmacSigner(credential).sign_post(
            '/v2/ocr/general-text',
            '{}',
            {'Host': HOST, 'Content-Type': 'application/json'},
            TIMESTAMP
        )

        assert signed.signature == SDK_SIGNATURE


class TestAws4ChainSigner:
    """Test the derived-key strategy."""

    def test_known_signature(self, credential):
        """Signature matches the independently computed value."""
        signer = Aws4ChainSigner(credential, region='ap-southeast-1', service='ocr')

        signed = signer.sign(ocr_request(), TIMESTAMP)

        assert signed.credential_scope == '20240101/ap-southeast-1/ocr/aws4_request'
        assert signed.string_to_sign == (
            f'AWS4-HMAC-SHA256\n{TIMESTAMP}\n20240101/ap-southeast-1/ocr/aws4_request\n{AWS4_CANONICAL_HASH}'
        )
        assert signed.signature == AWS4_SIGNATURE
        assert signed.headers['X-Amz-Date'] == TIMESTAMP

    def test_authorization_header_format(self, credential):
        """Authorization carries Credential=<ak>/<scope>."""
        signer = Aws4ChainSigner(credential, region='ap-southeast-1', service='ocr')

        signed = signer.sign(ocr_request(), TIMESTAMP)

        assert signed.authorization == (
            'AWS4-HMAC-SHA256 Credential=TESTAK/20240101/ap-southeast-1/ocr/aws4_request, '
            'SignedHeaders=content-type;host;x-amz-date, '
            f'Signature={AWS4_SIGNATURE}'
        )

    def test_scheme_isolation(self, credential):
        """Same canonical request, but the two strategies sign it differently."""
        headers = {'Host': HOST, 'Content-Type': 'application/json', 'X-Sdk-Date': TIMESTAMP}
        sdk = SdkHmacSigner(credential).sign(ocr_request(headers), TIMESTAMP)
        chain = Aws4ChainSigner(
            credential, region='ap-southeast-1', service='ocr', date_header='X-Sdk-Date'
        ).sign(ocr_request(headers), TIMESTAMP)

        assert sdk.canonical_request == chain.canonical_request
        assert sdk.string_to_sign != chain.string_to_sign
        assert sdk.signature != chain.signature

    def test_published_get_vanilla_vector(self):
        """Reproduces the published AWS get-vanilla signature."""
        credential = Credential('AKIDEXAMPLE', 'wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY')
        signer = Aws4ChainSigner(credential, region='us-east-1', service='service')

        signed = signer.sign_get('/', {'Host': 'example.amazonaws.com'}, timestamp='20150830T123600Z')

        assert signed.string_to_sign.endswith(
            'bb579772317eb040ac9ed261061d46c1f17a8133879d6129b6e1c25292927e63'
        )
        assert signed.signature == '5fa00fa31553b73ebf1942676e86291e8372ff2a2260956d9b8aae1d763fbf31'
        assert signed.authorization == (
            'AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20150830/us-east-1/service/aws4_request, '
            'SignedHeaders=host;x-amz-date, '
            'Signature=5fa00fa31553b73ebf1942676e86291e8372ff2a2260956d9b8aae1d763fbf31'
        )

    def test_missing_region_raises(self, credential):
        """Scope components are required."""
        with pytest.raises(SigningError):
            Aws4ChainSigner(credential, region='', service='ocr').sign(ocr_request(), TIMESTAMP)


class TestAuthHeaderComposer:
    """Test header composition and redaction."""

    def test_compose_sdk(self):
        value = AuthHeaderComposer.compose_sdk('AK', 'host', 'abc')

        assert value == 'SDK-HMAC-SHA256 Access=AK, SignedHeaders=host, Signature=abc'

    def test_compose_aws4(self):
        value = AuthHeaderComposer.compose_aws4('AK', '20240101/r/s/aws4_request', 'host', 'abc')

        assert value == 'AWS4-HMAC-SHA256 Credential=AK/20240101/r/s/aws4_request, SignedHeaders=host, Signature=abc'

    def test_redact_masks_access_key_and_signature(self):
        """Redacted value keeps only short prefixes."""
        value = AuthHeaderComposer.compose_sdk('ABCDEFGHIJKLMNOP', 'host', 'f' * 64)

        redacted = redact_authorization(value, 'ABCDEFGHIJKLMNOP')

        assert 'ABCDEFGHIJKLMNOP' not in redacted
        assert 'ABCDEFGH...' in redacted
        assert redacted.endswith('Signature=ffffffff...')

    def test_redact_bearer_token(self):
        assert redact_authorization('Bearer supersecrettoken') == 'Bearer supersec...'

    def test_signed_request_redacted_headers(self):
        """Printable headers keep the date but mask the access key and signature."""
        credential = Credential('ABCDEFGHIJKLMNOP', 'secret')
        signed = SdkHmacSigner(credential).sign(ocr_request(), TIMESTAMP)

        redacted = signed.redacted_headers(credential.access_key_id)

        assert redacted['X-Sdk-Date'] == TIMESTAMP
        assert redacted['Host'] == HOST
        assert 'ABCDEFGHIJKLMNOP' not in redacted['Authorization']
        assert 'Access=ABCDEFGH...' in redacted['Authorization']
        assert signed.signature not in redacted['Authorization']
        assert signed.headers['Authorization'] == signed.authorization

    def test_masked_access_key_matches_mask_value(self):
        """Credential masking uses the shared masking helper."""
        assert Credential('ABCDEFGHIJKLMNOP', 's').masked_access_key() == mask_value('ABCDEFGHIJKLMNOP')
        assert Credential('ABCDEFGHIJKLMNOP', 's').masked_access_key(4) == 'ABCD...'
        assert Credential('', 's').masked_access_key() == 'NOT SET'

    def test_credential_repr_hides_secret(self):
        """Secret key never appears in repr."""
        assert 'TOPSECRET' not in repr(Credential('AK', 'TOPSECRET'))


class TestTimestamp:
    """Test timestamp formatting."""

    def test_format_fixed_moment(self):
        moment = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        assert format_sdk_timestamp(moment) == '20240101T120000Z'

    def test_format_now_shape(self):
        value = format_sdk_timestamp()

        assert len(value) == 16
        assert value[8] == 'T'
        assert value.endswith('Z')
