"""Form layout: sections, labels and the choices offered by each select."""

JENIS_KELAMIN = ("Laki-laki", "Perempuan")
HUBUNGAN_KONTAK_DARURAT = ("Orang Tua", "Saudara", "Suami/Istri", "Anak", "Teman", "Lainnya")
JENIS_BANK = ("BCA", "BRI", "BNI", "Mandiri", "CIMB Niaga", "Danamon", "Permata", "BTN", "Lainnya")
POSISI = ("Daily Worker",)
CONTRACT_TYPE = ("Daily - Worker TDP",)
DEPARTEMENT = ("SOC Operator",)
LOKASI = ("CAKUNG 2",)

# (name, label, input kind, choices or placeholder)
SECTIONS = (
    ("Informasi Pribadi", (
        ("opsId", "OPS ID", "text", "Masukkan OPS ID"),
        ("nama", "Nama Lengkap", "text", "Masukkan nama lengkap"),
        ("nik", "NIK", "text", "16 digit NIK"),
        ("tempatLahir", "Tempat Lahir", "text", "Tempat lahir"),
        ("tanggalLahir", "Tanggal Lahir", "date", ""),
        ("umur", "Umur", "readonly", "Otomatis terisi"),
        ("jenisKelamin", "Jenis Kelamin", "select", JENIS_KELAMIN),
        ("npwp", "NPWP", "text", "Nomor NPWP (opsional)"),
        ("namaAyah", "Nama Ayah", "text", "Nama ayah"),
        ("namaIbu", "Nama Ibu", "text", "Nama ibu"),
    )),
    ("Informasi Kontak", (
        ("noHp", "No. HP", "tel", "08xxxxxxxxxx"),
        ("noWaKontakDarurat", "No. WA Kontak Darurat", "tel", "08xxxxxxxxxx"),
        ("namaKontakDarurat", "Nama Kontak Darurat", "text", "Nama kontak darurat"),
        ("hubunganKontakDarurat", "Hubungan Kontak Darurat", "select", HUBUNGAN_KONTAK_DARURAT),
    )),
    ("Informasi Alamat", (
        ("alamatKtp", "Alamat KTP", "textarea", "Alamat sesuai KTP"),
        ("alamatDomisili", "Alamat Domisili", "textarea", "Alamat tempat tinggal saat ini"),
        ("rtRw", "RT/RW", "text", "001/002"),
        ("noRumah", "No. Rumah", "text", "Nomor rumah"),
        ("kelurahan", "Kelurahan", "text", "Kelurahan"),
        ("kecamatan", "Kecamatan", "text", "Kecamatan"),
        ("kota", "Kota", "text", "Kota"),
        ("kodePos", "Kode Pos", "text", "12345"),
    )),
    ("Informasi Bank", (
        ("noRekening", "No. Rekening", "text", "Nomor rekening"),
        ("namaPenerima", "Nama Penerima", "text", "Nama pemilik rekening"),
        ("jenisBank", "Jenis Bank", "select", JENIS_BANK),
    )),
    ("Informasi Pekerjaan", (
        ("posisi", "Posisi", "select", POSISI),
        ("contractType", "Tipe Kontrak", "select", CONTRACT_TYPE),
        ("departement", "Departemen", "select", DEPARTEMENT),
        ("lokasi", "Lokasi", "select", LOKASI),
    )),
)

ATTACHMENT_LABELS = (
    ("fotoKtp", "Foto KTP"),
    ("fotoKk", "Foto KK"),
    ("bukuTabungan", "Buku Tabungan / Screenshot (opsional)"),
    ("foto", "Foto Diri"),
)
