# --- Servis Katmanı Hata Sınıfları ---

class ServiceError(Exception):
    """Servis katmanı için genel hata sınıfı."""
    pass

class AuthenticationRejected(ServiceError):
    """Yanlış şifre ya da eşleşen kullanıcı yok ve yedek giriş uygulanamadı."""
    pass

class PermissionDeniedError(ServiceError):
    """İşlemi yapan kullanıcı bu kaydı değiştiremez."""
    pass

class ProtectedIdentityError(ServiceError):
    """Kullanıcı kendi kaydını silmeye çalıştı."""
    pass

class StoreUnavailableError(ServiceError):
    """Uzak depo yazmayı kabul etmedi; hiçbir şey değişmedi."""
    pass

class StillLoadingError(ServiceError):
    """Başlangıç yüklemesi henüz bitmedi ya da zaman aşımına uğramadı."""
    pass
